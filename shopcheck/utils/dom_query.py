from __future__ import annotations

ROLE_SELECTORS = {
    "button": "button, [role='button'], input[type='button'], input[type='submit'], input[type='reset']",
    "link": "a[href], [role='link']",
    "dialog": "dialog, [role='dialog'], [role='alertdialog']",
    "navigation": "nav, [role='navigation']",
    "heading": "h1, h2, h3, h4, h5, h6, [role='heading']",
    "textbox": (
        "input:not([type]), input[type='text'], input[type='email'], input[type='search'], "
        "input[type='tel'], input[type='url'], textarea, [role='textbox']"
    ),
    "checkbox": "input[type='checkbox'], [role='checkbox']",
    "menuitem": "[role='menuitem']",
}

# arguments: root element (or null for the document), mode, css selector, pattern source, limit
LOCATE_SCRIPT = r"""
const [root, mode, selector, pattern, limit] = arguments;
const scope = root || document;
const regex = pattern ? new RegExp(pattern, "i") : null;
const SKIP = new Set(["SCRIPT", "STYLE", "NOSCRIPT", "TEMPLATE", "HEAD", "TITLE", "META", "LINK"]);

const normalize = (value) => (value || "").replace(/\s+/g, " ").trim();
const rendered = (node) => node.getClientRects().length > 0;
const textOf = (node) => normalize(rendered(node) ? node.innerText : node.textContent);
const byIds = (ids) => ids
  .split(/\s+/)
  .map((id) => document.getElementById(id))
  .filter(Boolean)
  .map(textOf)
  .join(" ");

const labelText = (node) => {
  const labelledBy = node.getAttribute("aria-labelledby");
  if (labelledBy) {
    const text = byIds(labelledBy);
    if (text) return text;
  }
  const aria = node.getAttribute("aria-label");
  if (aria) return normalize(aria);
  if (node.labels && node.labels.length) {
    return normalize(Array.from(node.labels).map(textOf).join(" "));
  }
  return "";
};

const accessibleName = (node) => {
  const label = labelText(node);
  if (label) return label;
  if (node.tagName === "INPUT") {
    return normalize(node.value || node.getAttribute("alt") || node.getAttribute("title"));
  }
  const text = textOf(node);
  if (text) return text;
  return normalize(node.getAttribute("title") || node.getAttribute("alt"));
};

let nodes;
let nameOf;
if (mode === "role") {
  nodes = scope.querySelectorAll(selector);
  nameOf = accessibleName;
} else if (mode === "label") {
  nodes = scope.querySelectorAll("input, textarea, select, [contenteditable='true']");
  nameOf = labelText;
} else if (mode === "placeholder") {
  nodes = scope.querySelectorAll("[placeholder]");
  nameOf = (node) => normalize(node.getAttribute("placeholder"));
} else {
  nodes = scope.querySelectorAll("*");
  nameOf = (node) => normalize(node.innerText);
}

const matches = [];
for (const node of nodes) {
  if (SKIP.has(node.tagName)) continue;
  // innerText only carries rendered text, and only for rendered nodes
  if (mode === "text" && !rendered(node)) continue;
  if (regex && !regex.test(nameOf(node))) continue;
  matches.push(node);
}

// text matches keep the innermost element, never an ancestor that only wraps it
const result = mode === "text"
  ? matches.filter((node) => !matches.some((other) => other !== node && node.contains(other)))
  : matches;
return result.slice(0, limit);
"""

LOAD_STATE_SCRIPT = """
return [document.readyState, performance.getEntriesByType("resource").length];
"""

INNER_SIZE_SCRIPT = """
return [window.innerWidth, window.innerHeight];
"""

PAGE_METRICS_SCRIPT = """
const doc = document.documentElement;
return [
  Math.max(doc.scrollWidth, document.body ? document.body.scrollWidth : 0),
  Math.max(doc.scrollHeight, document.body ? document.body.scrollHeight : 0),
];
"""


def role_selector(role: str) -> str:
    normalized = role.lower()
    return ROLE_SELECTORS.get(normalized, f"[role='{normalized}']")


def data_testid_selector(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace('"', '\\"')
    return f'[data-testid*="{escaped}"]'
