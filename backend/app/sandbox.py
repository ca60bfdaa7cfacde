import json

from .metrics import record_sandbox_document

# Hosted in <iframe sandbox="allow-scripts"> without allow-same-origin, so the
# script gets an opaque origin: no access to the page's storage or navigation.
FRAME_SANDBOX = "allow-scripts"

RUNNER_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Runner</title>
</head>
<body>
  <pre id="out" style="padding:12px;margin:0;white-space:pre-wrap"></pre>
  <script>
    (function () {{
      var out = document.getElementById("out");
      function print() {{
        out.textContent += Array.prototype.slice.call(arguments).join(" ") + "\\n";
      }}
      var console = {{ log: print, info: print, warn: print, error: print }};
      try {{
        new Function("print", "console", {code})(print, console);
      }} catch (e) {{
        print("Error:", e && e.message ? e.message : String(e));
      }}
    }})();
  </script>
</body>
</html>
"""


def script_safe_json(value) -> str:
    """JSON text that cannot close an inline <script> element."""
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def build_runner_document(code: str) -> str:
    record_sandbox_document()
    return RUNNER_TEMPLATE.format(code=script_safe_json(code))
