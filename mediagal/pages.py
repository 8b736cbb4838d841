# file: mediagal/pages.py
#
# HTML pages. Plain templates with __PLACEHOLDER__ slots, filled in a
# single pass by _fill; every value is escaped before it goes in.

# ===== MG:BEGIN_IMPORTS =====
import json
import re

from mediagal.paths import html_escape
# ===== MG:END_IMPORTS =====

_slot_re = re.compile(r'__([A-Z][A-Z0-9_]*?)__')


def _fill(tmpl, **values):
    # inserted text is never scanned again, so a file named '__BODY__' stays a name
    return _slot_re.sub(lambda m: values.get(m.group(1), m.group(0)), tmpl)


def _js(value):
    # safe inside <script>: no closing tag can appear
    return json.dumps(value).replace('</', '<\\/')


# ===== MG:BEGIN_BASE_STYLE =====
BASE_STYLE = r'''
  :root { --bg:#111; --fg:#eee; --muted:#aaa; --card:#1b1b1b; --cell:140px; }
  * { box-sizing:border-box; }
  html,body { margin:0; background:var(--bg); color:var(--fg); font-family:system-ui, -apple-system, Segoe UI, Roboto, sans-serif; }
  a { color:var(--fg); }
  header { position:sticky; top:0; z-index:2; display:flex; align-items:center; gap:10px; padding:10px 12px; background:#181818; border-bottom:1px solid #222; }
  header .title { font-weight:600; letter-spacing:.3px; overflow-wrap:anywhere; line-height:1.2; }
  header .spacer { flex:1; }
  a.btn { background:#222; color:#eee; border:1px solid #333; border-radius:8px; padding:6px 10px; text-decoration:none; }
  .empty { padding:24px; color:var(--muted); }
'''
# ===== MG:END_BASE_STYLE =====


# ===== MG:BEGIN_FOLDER_PAGE =====
FOLDER_TMPL = r'''<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>__TITLE__</title>
<style>__STYLE__
  .grid { display:grid; grid-template-columns:repeat(auto-fill, minmax(var(--cell), 1fr)); gap:10px; padding:12px; }
  .card { display:block; background:var(--card); border:1px solid #222; border-radius:10px; overflow:hidden; text-decoration:none; }
  .thumb { aspect-ratio:1/1; display:flex; align-items:center; justify-content:center; background:#0b0b0b; }
  .thumb img { width:100%; height:100%; object-fit:cover; image-orientation:from-image; }
  .cap { padding:6px 8px; font-size:13px; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
  .mod { padding:0 8px 6px; font-size:11px; color:var(--muted); }
</style>
</head>
<body>
  <header>
    __UP__
    <div class="title">__HEADING__</div>
    <div class="spacer"></div>
  </header>
  __BODY__
</body>
</html>'''


def folder_page(title, link, parent, entries):
    cards = []
    for e in entries:
        name = html_escape(e.name)
        cards.append(
            '<a class="card' + (' folder' if e.is_dir else '') + '" href="' + html_escape(e.link) + '" title="' + name + '">'
            '<div class="thumb"><img loading="lazy" decoding="async" src="' + html_escape(e.icon) + '" alt=""></div>'
            '<div class="cap">' + ('📁 ' if e.is_dir else '') + name + '</div>'
            '<div class="mod">' + html_escape(e.modified) + '</div>'
            '</a>'
        )
    body = ('<div class="grid">' + ''.join(cards) + '</div>') if cards else '<div class="empty">Nothing here.</div>'
    up = ('<a class="btn" href="' + html_escape(parent) + '" title="Up">⋯</a>') if parent else ''
    return _fill(FOLDER_TMPL,
                 STYLE=BASE_STYLE,
                 TITLE=html_escape(title),
                 HEADING=html_escape(title) + ' <small style="color:#888">' + html_escape(link) + '</small>',
                 UP=up,
                 BODY=body)
# ===== MG:END_FOLDER_PAGE =====


# ===== MG:BEGIN_IMAGE_PAGE =====
IMAGE_TMPL = r'''<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1,user-scalable=no">
<title>__TITLE__</title>
<style>__STYLE__
  html,body { height:100%; background:#000; overscroll-behavior:none; }
  .stage { position:fixed; inset:0; display:flex; align-items:center; justify-content:center; overflow:hidden; touch-action:none; }
  .stage img { max-width:100%; max-height:100%; object-fit:contain; image-orientation:from-image; user-select:none; }
  .stage.pano img { max-width:none; height:100%; cursor:grab; }
  .bar { position:fixed; left:0; right:0; bottom:0; display:flex; gap:8px; align-items:center; padding:8px 12px; background:rgba(0,0,0,.5); }
  .bar .name { flex:1; text-align:center; font-size:13px; color:#ccc; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
</style>
</head>
<body>
  <div class="stage" id="stage"><img id="current" alt=""></div>
  <div class="bar">
    <a class="btn" href="__BACK__">⋯</a>
    <a class="btn" href="#" id="leftBtn">◀</a>
    <div class="name" id="name"></div>
    <a class="btn" href="#" id="rightBtn">▶</a>
  </div>
  <script>
    const names = __NAMES__, base = __BASE__, r2l = __R2L__, pano = __PANO__;
    let index = __INDEX__;
    const cur = document.getElementById('current'), stage = document.getElementById('stage'), label = document.getElementById('name');
    const enc = (n) => encodeURIComponent(n);
    const clamp = (i) => Math.max(0, Math.min(names.length-1, i));
    function preload(i){ if(i>=0 && i<names.length){ const im=new Image(); im.src=base+enc(names[i]); } }

    function show(i){
      index = clamp(i);
      cur.src = base + enc(names[index]);
      label.textContent = names[index] + '  (' + (index+1) + '/' + names.length + ')';
      document.title = names[index];
      history.replaceState({}, '', base + enc(names[index]) + '.image.html');
      stage.scrollLeft = 0; panX = 0; cur.style.transform = '';
      preload(index-1); preload(index+1);
    }
    // reading direction decides which side is "next"
    function step(side){ show(index + (side === 'right' ? 1 : -1) * (r2l ? -1 : 1)); }

    document.getElementById('leftBtn').addEventListener('click', (e)=>{ e.preventDefault(); step('left'); });
    document.getElementById('rightBtn').addEventListener('click', (e)=>{ e.preventDefault(); step('right'); });
    window.addEventListener('keydown', (e)=>{
      if (e.key==='ArrowRight') step('right');
      else if (e.key==='ArrowLeft') step('left');
      else if (e.key==='Escape') location.href = __BACK_JS__;
    });

    let startX = null, panX = 0, panStart = 0;
    if (pano) stage.classList.add('pano');
    stage.addEventListener('pointerdown', (e)=>{ startX = e.clientX; panStart = panX; }, {passive:true});
    stage.addEventListener('pointermove', (e)=>{
      if (startX === null || !pano) return;
      panX = panStart + (e.clientX - startX);
      cur.style.transform = `translateX(${panX}px)`;
    }, {passive:true});
    stage.addEventListener('pointerup', (e)=>{
      if (startX === null) return;
      const dx = e.clientX - startX; startX = null;
      if (!pano && Math.abs(dx) >= 80) step(dx < 0 ? 'right' : 'left');
    }, {passive:true});

    show(index);
  </script>
</body>
</html>'''


def image_page(title, base_url, names, index, options=frozenset()):
    return _fill(IMAGE_TMPL,
                 STYLE=BASE_STYLE,
                 TITLE=html_escape(title),
                 BACK=html_escape(base_url),
                 BACK_JS=_js(base_url),
                 NAMES=_js(list(names)),
                 BASE=_js(base_url),
                 R2L='true' if 'r2l' in options else 'false',
                 PANO='true' if '360vr' in options else 'false',
                 INDEX=str(int(index)))
# ===== MG:END_IMAGE_PAGE =====


# ===== MG:BEGIN_MOVIE_PAGE =====
MOVIE_TMPL = r'''<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>__TITLE__</title>
<style>__STYLE__
  video { display:block; width:100%; max-height:calc(100vh - 60px); background:#000; }
</style>
</head>
<body>
  <header>
    <a class="btn" href="__BACK__" title="Up">⋯</a>
    <div class="title">__TITLE__</div>
  </header>
  <video controls autoplay playsinline preload="metadata" src="__SRC__"></video>
</body>
</html>'''


def movie_page(title, src, base_url):
    return _fill(MOVIE_TMPL,
                 STYLE=BASE_STYLE,
                 TITLE=html_escape(title),
                 BACK=html_escape(base_url),
                 SRC=html_escape(src))
# ===== MG:END_MOVIE_PAGE =====


# ===== MG:BEGIN_MARKDOWN_PAGE =====
MARKDOWN_TMPL = r'''<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>__TITLE__</title>
<style>__STYLE__
  .markdown-body { max-width:820px; margin:0 auto; padding:16px 20px 40px; line-height:1.65; }
  .markdown-body pre { background:#1b1b1b; border:1px solid #2a2a2a; border-radius:8px; padding:12px; overflow:auto; }
  .markdown-body code { background:#1b1b1b; border-radius:4px; padding:1px 4px; }
  .markdown-body table { border-collapse:collapse; }
  .markdown-body th, .markdown-body td { border:1px solid #333; padding:4px 8px; }
  .markdown-body img { max-width:100%; }
</style>
</head>
<body>
  <header>
    <a class="btn" href="__BACK__" title="Up">⋯</a>
    <div class="title">__TITLE__</div>
  </header>
  <article class="markdown-body">
__CONTENT__
  </article>
</body>
</html>'''


def markdown_page(title, base_url, content_html):
    # content is already HTML and goes in as is
    return _fill(MARKDOWN_TMPL,
                 STYLE=BASE_STYLE,
                 TITLE=html_escape(title),
                 BACK=html_escape(base_url),
                 CONTENT=content_html)
# ===== MG:END_MARKDOWN_PAGE =====


# ===== MG:BEGIN_NOT_FOUND_PAGE =====
NOT_FOUND_TMPL = r'''<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Not Found</title>
<style>__STYLE__
  .box { max-width:560px; margin:15vh auto; padding:24px; background:#1b1b1b; border:1px solid #2a2a2a; border-radius:12px; }
</style>
</head>
<body>
  <div class="box">
    <h2>Not Found</h2>
    <p>Nothing to show at <code>__LINK__</code>.</p>
    <p><a class="btn" href="/">Back to the top</a></p>
  </div>
</body>
</html>'''


def not_found_page(link):
    return _fill(NOT_FOUND_TMPL,
                 STYLE=BASE_STYLE,
                 LINK=html_escape(link))
# ===== MG:END_NOT_FOUND_PAGE =====
