"""
HTML dashboard template.

The whole AuditResult is embedded as JSON and rendered client-side, so the
page works from the filesystem without any other assets.
"""

from string import Template

PAGE = Template("""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>$title</title>
  <style>
    :root{--bg:#0b1220;--card:#111a2e;--ink:#e9f0ff;--muted:#9fb0d0;--line:#1f2b45;
          --pass:#34d399;--fail:#f87171;--bar:#17304d}
    body.light{--bg:#f1f5f9;--card:#fff;--ink:#0f172a;--muted:#475569;--line:#e2e8f0;--bar:#e6edf9}
    *{box-sizing:border-box}
    body{margin:0;font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;background:var(--bg);color:var(--ink)}
    .page{max-width:1120px;margin:0 auto;padding:40px 24px 64px}
    header{display:flex;justify-content:space-between;align-items:center;gap:16px;flex-wrap:wrap}
    h1{margin:0;font-size:24px}
    .meta{color:var(--muted);font-size:13px}
    .menu{display:flex;gap:8px;align-items:center}
    .menu button,.menu select,.menu input{font-size:12px;border-radius:8px;border:1px solid var(--line);
          background:var(--card);color:var(--ink);padding:6px 10px}
    .overall{font-size:48px;font-weight:800}
    .grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(240px,1fr));gap:12px;margin:24px 0}
    .card{background:var(--card);border:1px solid var(--line);border-radius:12px;padding:14px}
    .card h3{margin:0 0 8px;font-size:14px}
    .bar{height:8px;background:var(--bar);border-radius:4px;overflow:hidden}
    .bar span{display:block;height:100%;background:var(--pass)}
    table{width:100%;border-collapse:collapse;font-size:13px}
    th,td{text-align:left;padding:8px;border-bottom:1px solid var(--line);vertical-align:top}
    .pill{display:inline-block;padding:2px 8px;border-radius:999px;font-size:11px;font-weight:600}
    .pass{background:#34d39922;color:var(--pass)} .fail{background:#f8717122;color:var(--fail)}
    .sev-critical{color:#ef4444}.sev-high{color:#f97316}.sev-medium{color:#eab308}.sev-low{color:#22c55e}.sev-info{color:var(--muted)}
    .muted{color:var(--muted)}
    pre{white-space:pre-wrap;margin:4px 0 0;font-size:12px}
  </style>
</head>
<body>
<div class="page">
  <header>
    <div>
      <h1>$title</h1>
      <div class="meta" id="meta"></div>
    </div>
    <div class="menu">
      <input type="search" id="search" placeholder="Search findings"/>
      <select id="status">
        <option value="">All</option>
        <option value="fail">Failed</option>
        <option value="pass">Passed</option>
      </select>
      <button id="theme">Theme</button>
    </div>
  </header>
  <div class="overall" id="overall"></div>
  <div class="grid" id="categories"></div>
  <table>
    <thead><tr><th>Category</th><th>Check</th><th>Severity</th><th>Status</th><th>Details</th></tr></thead>
    <tbody id="findings"></tbody>
  </table>
</div>
<script id="audit-data" type="application/json">$data</script>
<script>
(function () {
  var data = JSON.parse(document.getElementById('audit-data').textContent);
  function esc(s) {
    return String(s == null ? '' : s).replace(/[&<>"']/g, function (c) {
      return {'&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;'}[c];
    });
  }
  document.getElementById('meta').textContent = data.targetDir + ' | ' + data.timestamp;
  document.getElementById('overall').textContent = data.overallScore + ' / 100';
  document.getElementById('categories').innerHTML = data.categories.map(function (c) {
    var failed = c.findings.filter(function (f) { return f.status === 'fail'; }).length;
    return '<div class="card"><h3>' + esc(c.title) + '</h3>' +
      '<div class="bar"><span style="width:' + c.score + '%"></span></div>' +
      '<div class="muted">' + c.score + ' | ' + (c.findings.length - failed) + ' passed, ' + failed + ' failed</div></div>';
  }).join('');
  function render() {
    var q = document.getElementById('search').value.toLowerCase();
    var st = document.getElementById('status').value;
    var rows = [];
    data.categories.forEach(function (c) {
      c.findings.forEach(function (f) {
        if (st && f.status !== st) return;
        var text = (c.title + ' ' + f.title + ' ' + f.message).toLowerCase();
        if (q && text.indexOf(q) === -1) return;
        rows.push('<tr><td>' + esc(c.title) + '</td><td>' + esc(f.title) + '</td>' +
          '<td class="sev-' + esc(f.severity) + '">' + esc(f.severity) + '</td>' +
          '<td><span class="pill ' + esc(f.status) + '">' + esc(f.status) + '</span></td>' +
          '<td><pre>' + esc(f.message) + '</pre>' +
          (f.suggestion ? '<div class="muted">' + esc(f.suggestion) + '</div>' : '') +
          (f.file ? '<div class="muted">' + esc(f.file) + '</div>' : '') + '</td></tr>');
      });
    });
    document.getElementById('findings').innerHTML = rows.join('');
  }
  document.getElementById('search').addEventListener('input', render);
  document.getElementById('status').addEventListener('change', render);
  document.getElementById('theme').addEventListener('click', function () {
    document.body.classList.toggle('light');
  });
  render();
})();
</script>
</body>
</html>
""")
