"""Minimal HTML pages: login form and the gated admin dashboard."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    """Login form that posts to the auth API."""
    return HTMLResponse(_LOGIN_HTML)


@router.get("/admin", response_class=HTMLResponse)
async def admin_page() -> HTMLResponse:
    """Admin dashboard that consumes the admin API."""
    return HTMLResponse(_ADMIN_HTML)


_STYLE = """
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
"""

_LOGIN_HTML = f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Offer Catalog Login</title>
{_STYLE}
  </head>
  <body>
    <h1>Offer Catalog Admin</h1>
    <div class="row"><input id="email" type="email" placeholder="Email" /></div>
    <div class="row">
      <input id="password" type="password" placeholder="Password" />
    </div>
    <div class="row"><button onclick="login()">Sign in</button></div>
    <pre id="output">Ready.</pre>
    <script>
      async function login() {{
        const output = document.getElementById('output');
        const res = await fetch('/api/auth/login', {{
          method: 'POST',
          headers: {{ 'Content-Type': 'application/json' }},
          body: JSON.stringify({{
            email: document.getElementById('email').value,
            password: document.getElementById('password').value
          }})
        }});
        if (!res.ok) {{
          const data = await res.json();
          output.textContent = 'Error: ' + (data.error || res.status);
          return;
        }}
        window.location.href = '/admin';
      }}
    </script>
  </body>
</html>
"""

_ADMIN_HTML = f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Offer Catalog Admin</title>
{_STYLE}
  </head>
  <body>
    <h1>Offer Catalog Admin</h1>
    <div class="row">
      <button onclick="loadOffers()">Offers</button>
      <button onclick="logout()">Sign out</button>
    </div>
    <div class="row">
      <input id="offer-id" placeholder="Offer id" />
      <button onclick="toggleOffer()">Toggle visibility</button>
      <button onclick="deleteOffer()">Delete</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      async function show(res) {{
        const output = document.getElementById('output');
        if (res.status === 401) {{
          window.location.href = '/login';
          return;
        }}
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }}
      function offerId() {{
        return encodeURIComponent(document.getElementById('offer-id').value);
      }}
      async function loadOffers() {{
        await show(await fetch('/api/admin/offers'));
      }}
      async function toggleOffer() {{
        await show(await fetch('/api/admin/offers/' + offerId() + '/toggle', {{
          method: 'PATCH'
        }}));
      }}
      async function deleteOffer() {{
        await show(await fetch('/api/admin/offers/' + offerId(), {{
          method: 'DELETE'
        }}));
      }}
      async function logout() {{
        await fetch('/api/auth/logout', {{ method: 'POST' }});
        window.location.href = '/login';
      }}
    </script>
  </body>
</html>
"""
