"""HTML template for the self-contained report.

``__NAME__`` placeholders are filled by ``render_html_report``; the embedded JS
uses ``${...}`` template literals, so the template is not a format string.
"""

HTML_TEMPLATE = r"""<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>__TITLE__</title>
<style>
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; margin: 0; }
  header { padding: 12px 16px; border-bottom: 1px solid #ddd; }
  .container { display: flex; height: calc(100vh - 78px); }
  .sidebar { width: 360px; border-right: 1px solid #ddd; padding: 12px; overflow: auto; }
  .main { flex: 1; padding: 12px; overflow: hidden; display: flex; flex-direction: column; gap: 8px; }

  .summary { display: flex; gap: 16px; flex-wrap: wrap; font-size: 14px; color: #333; }
  .pill { padding: 4px 8px; border: 1px solid #ddd; border-radius: 999px; background: #fafafa; }

  .tree-node { cursor: pointer; user-select: none; padding: 2px 4px; border-radius: 4px; }
  .tree-node:hover { background: #f3f3f3; }
  .tree-node.selected { background: #e9f2ff; border: 1px solid #cfe3ff; }
  .indent { display: inline-block; }
  .toggle { display: inline-block; width: 16px; text-align: center; color: #666; }
  .muted { color: #777; font-size: 12px; }

  .tabs { display: flex; gap: 8px; margin-bottom: 8px; }
  .tab { padding: 6px 10px; border: 1px solid #ddd; background: #f8f8f8; border-radius: 6px; cursor: pointer; }
  .tab.active { background: #e9f2ff; border-color: #cfe3ff; }

  #graphPane { flex: 1; display: flex; flex-direction: column; }
  #graphView { flex: 1; min-height: 420px; border: 1px solid #eee; border-radius: 8px; overflow: hidden; }
  #graphView svg { width: 100%; height: 100%; cursor: grab; }
  #graphView svg:active { cursor: grabbing; }

  .g-edge { stroke: #999; stroke-width: 1.4; fill: none; pointer-events: none; }
  .g-node rect { rx: 6; ry: 6; stroke: #5570d4; stroke-width: 1; }
  .g-node text { font-size: 12px; fill: #111; pointer-events: none; }
  .g-node.selected rect { stroke: #111; stroke-width: 2; }

  table { border-collapse: collapse; width: 100%; margin-top: 8px; }
  th, td { border-bottom: 1px solid #eee; padding: 6px 8px; text-align: left; font-size: 14px; }
  th { position: sticky; top: 0; background: white; border-bottom: 1px solid #ddd; }
  .num { text-align: right; font-variant-numeric: tabular-nums; }
  code { font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, monospace; font-size: 13px; }
</style>
</head>
<body>
<header>
  <div class="summary" id="summary"></div>
  <div class="muted" style="margin-top: 4px;">__TITLE__ · generated __GENERATED_AT__</div>
</header>

<div class="container">
  <div class="sidebar">
    <div style="display:flex; gap: 8px; margin-bottom: 8px;">
      <input id="search" placeholder="Search name..." style="flex:1; padding: 6px 8px; border: 1px solid #ddd; border-radius: 6px;">
      <button id="expandAll">Expand</button>
      <button id="collapseAll">Collapse</button>
    </div>
    <div id="tree"></div>
  </div>

  <div class="main">
    <div class="tabs">
      <button class="tab active" id="tabTree">Tree</button>
      <button class="tab" id="tabGraph">Graph</button>
    </div>

    <div id="detailPane">
      <h2 id="title">Select a node</h2>
      <div id="meta" class="muted"></div>
      <table id="opsTable" style="display:none;">
        <thead>
          <tr><th>addr</th><th>operator</th><th class="num">activations</th><th class="num">total_active_ms</th></tr>
        </thead>
        <tbody id="opsBody"></tbody>
      </table>
    </div>

    <div id="graphPane" style="display:none;">
      <div id="graphView">__GRAPH_SVG__</div>
    </div>
  </div>
</div>

<script>
const DATA = __DATA__;
const STATE = __STATE__;
const VIEWPORT = { minScale: __MIN_SCALE__, maxScale: __MAX_SCALE__, zoomK: __ZOOM_K__ };

const state = {
  expanded: new Set(STATE.expanded),
  selected: STATE.selected,
  search: STATE.search,
  view: STATE.view,
  graph: { tx: STATE.viewport.tx, ty: STATE.viewport.ty, scale: STATE.viewport.scale },
};

function fmtMs(x) {
  return Number(x).toFixed(3);
}

function escapeHtml(s) {
  return String(s)
    .replaceAll("&", "&amp;")
    .replaceAll("<", "&lt;")
    .replaceAll(">", "&gt;")
    .replaceAll('"', "&quot;")
    .replaceAll("'", "&#39;");
}

function renderSummary() {
  const t = DATA.totals;
  document.getElementById("summary").innerHTML = `
    <span class="pill">names: <b>${t.names}</b></span>
    <span class="pill">operators in log: <b>${t.operators_in_log}</b></span>
    <span class="pill">operators mapped: <b>${t.operators_mapped}</b></span>
    <span class="pill">mapped ms: <b>${fmtMs(t.total_mapped_ms)}</b></span>
    <span class="pill">mapped activations: <b>${t.total_mapped_activations}</b></span>
  `;
}

function nodeMatches(name, node) {
  if (!state.search) return true;
  const s = state.search.toLowerCase();
  return name.toLowerCase().includes(s) || (node.label || "").toLowerCase().includes(s);
}

function renderTree() {
  const root = document.getElementById("tree");
  root.innerHTML = "";

  const mustShow = new Set();
  if (state.search) {
    const parent = new Map();
    for (const [name, node] of Object.entries(DATA.nodes)) {
      for (const c of node.children) parent.set(c, name);
    }
    for (const [name, node] of Object.entries(DATA.nodes)) {
      if (!nodeMatches(name, node)) continue;
      let cur = name;
      while (cur && !mustShow.has(cur)) {
        mustShow.add(cur);
        cur = parent.get(cur);
      }
    }
  }

  function renderSubtree(name, depth) {
    const node = DATA.nodes[name];
    if (!node) return;
    if (state.search && !mustShow.has(name)) return;

    const isExpanded = state.expanded.has(name);
    const hasKids = node.children.length > 0;

    const row = document.createElement("div");
    row.className = "tree-node" + (state.selected === name ? " selected" : "");
    row.onclick = () => selectNode(name);

    const indent = document.createElement("span");
    indent.className = "indent";
    indent.style.width = `${depth * 16}px`;
    row.appendChild(indent);

    const toggle = document.createElement("span");
    toggle.className = "toggle";
    toggle.textContent = hasKids ? (isExpanded ? "▾" : "▸") : " ";
    toggle.onclick = (e) => {
      e.stopPropagation();
      if (!hasKids) return;
      if (isExpanded) state.expanded.delete(name);
      else state.expanded.add(name);
      renderTree();
    };
    row.appendChild(toggle);

    const label = document.createElement("span");
    label.innerHTML = `${escapeHtml(node.label)} <span class="muted">(${fmtMs(node.self_total_active_ms)} ms, ${node.self_activations} act)</span>`;
    row.appendChild(label);
    root.appendChild(row);

    if (hasKids && isExpanded) {
      for (const c of node.children) renderSubtree(c, depth + 1);
    }
  }

  for (const r of DATA.roots) renderSubtree(r, 0);
}

function renderDetail() {
  const node = DATA.nodes[state.selected];
  if (!node) return;
  document.getElementById("title").textContent = node.label;

  const extra = node.extra_parents.length ? ` extra parents: ${node.extra_parents.join(", ")}` : "";
  document.getElementById("meta").textContent =
    `name: ${node.name} | self: ${fmtMs(node.self_total_active_ms)} ms | activations: ${node.self_activations}` + extra;

  const tbl = document.getElementById("opsTable");
  const body = document.getElementById("opsBody");
  body.innerHTML = "";
  if (!node.operators.length) {
    tbl.style.display = "none";
    return;
  }
  tbl.style.display = "table";
  for (const op of node.operators) {
    const tr = document.createElement("tr");
    tr.innerHTML = `
      <td><code>[${op.addr.join(", ")}]</code></td>
      <td>${escapeHtml(op.op_name)}</td>
      <td class="num">${op.activations}</td>
      <td class="num">${fmtMs(op.total_active_ms)}</td>
    `;
    body.appendChild(tr);
  }
}

function renderSelection() {
  for (const g of document.querySelectorAll("#graphView .g-node")) {
    g.classList.toggle("selected", g.getAttribute("data-name") === state.selected);
  }
}

function applyTransform() {
  const viewport = document.getElementById("viewport");
  if (!viewport) return;
  viewport.setAttribute(
    "transform",
    `translate(${state.graph.tx} ${state.graph.ty}) scale(${state.graph.scale})`
  );
}

function selectNode(name) {
  state.selected = name;
  renderDetail();
  renderTree();
  renderSelection();
}

function bindGraph() {
  const svg = document.getElementById("graphSvg");
  if (!svg) return;

  svg.addEventListener("click", (e) => {
    const g = e.target.closest(".g-node");
    if (!g) return;
    const name = g.getAttribute("data-name");
    if (name) selectNode(name);
  });

  let dragging = false;
  let lastX = 0;
  let lastY = 0;

  svg.addEventListener("pointerdown", (e) => {
    if (e.button !== 0) return;
    dragging = true;
    lastX = e.clientX;
    lastY = e.clientY;
    svg.setPointerCapture(e.pointerId);
  });

  svg.addEventListener("pointermove", (e) => {
    if (!dragging) return;
    const dx = e.clientX - lastX;
    const dy = e.clientY - lastY;
    lastX = e.clientX;
    lastY = e.clientY;
    state.graph.tx += dx / state.graph.scale;
    state.graph.ty += dy / state.graph.scale;
    applyTransform();
  });

  svg.addEventListener("pointerup", () => { dragging = false; });
  svg.addEventListener("pointercancel", () => { dragging = false; });

  svg.addEventListener("wheel", (e) => {
    e.preventDefault();
    const oldScale = state.graph.scale;
    let newScale = oldScale * Math.exp(-e.deltaY * VIEWPORT.zoomK);
    newScale = Math.max(VIEWPORT.minScale, Math.min(VIEWPORT.maxScale, newScale));
    if (newScale === oldScale) return;

    const pt = svg.createSVGPoint();
    pt.x = e.clientX;
    pt.y = e.clientY;
    const cursor = pt.matrixTransform(svg.getScreenCTM().inverse());

    const k = newScale / oldScale;
    state.graph.tx = state.graph.tx + (cursor.x - state.graph.tx) * (1 - k);
    state.graph.ty = state.graph.ty + (cursor.y - state.graph.ty) * (1 - k);
    state.graph.scale = newScale;
    applyTransform();
  }, { passive: false });
}

function switchView(view) {
  state.view = view;
  const graph = view === "graph";
  document.getElementById("detailPane").style.display = graph ? "none" : "block";
  document.getElementById("graphPane").style.display = graph ? "flex" : "none";
  document.getElementById("tabGraph").classList.toggle("active", graph);
  document.getElementById("tabTree").classList.toggle("active", !graph);
}

document.getElementById("search").addEventListener("input", (e) => {
  state.search = e.target.value || "";
  renderTree();
});
document.getElementById("expandAll").onclick = () => {
  for (const [name, node] of Object.entries(DATA.nodes)) {
    if (node.children.length) state.expanded.add(name);
  }
  renderTree();
};
document.getElementById("collapseAll").onclick = () => {
  state.expanded.clear();
  renderTree();
};
document.getElementById("tabTree").onclick = () => switchView("tree");
document.getElementById("tabGraph").onclick = () => switchView("graph");

renderSummary();
renderTree();
renderDetail();
bindGraph();
applyTransform();
switchView(state.view);
</script>
</body>
</html>
"""
