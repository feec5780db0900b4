# herdweb

Building blocks for small Python web applications: renderers, route
helpers, a response wrapper, a session API, a thread-based background worker
and WSGI servers.

## Installation

```sh
pip install herdweb
```

To run the test suite:

```sh
pip install "herdweb[test]"
pytest
```

## Rendering (`herdweb.render`)

Every renderer has a `content_type` and a `render(w, data)` method. `w` is a
binary stream (for example `io.BytesIO`) and the renderer writes bytes to it.

- `herdweb.render.formats`: `json(value)` writes compact JSON followed by a
  newline. `<`, `>` and `&` are escaped as `\u003c`, `\u003e` and `\u0026`.
  `xml(value)` writes the XML header, then indented XML. A dataclass becomes
  an element named after its class, or after its `xml_name` attribute if it
  has one, with one child element per field.
- `herdweb.render.renderer`: the `Renderer` base class, `RenderError`, and
  `func(content_type, fn)`, which renders by calling `fn(w, data)`.
- `herdweb.render.download`: `download(ctx, name, reader)` writes the whole
  reader and adds `Content-Disposition` and `Content-Length` headers to
  `ctx.response.headers`. The content type is guessed from the file extension
  and falls back to `application/octet-stream`.
- `herdweb.render.sse`: `EventSource(response)` sets the event-stream headers.
  `write(event_type, data)` sends `data: {"data": ..., "type": ...}` and
  flushes the response.
- `herdweb.render.engine`: `Engine(Options(...))` builds template renderers
  that share layouts, helpers and template engines:
  `html`, `javascript`, `plain`, `string`, `template`, plus `json`, `xml`,
  `func`, `download` and `auto`. Each of these methods except `json`, `xml`,
  `func` and `download` also exists as a module-level function that uses a
  default engine.

### Templates

Templates use Jinja2 syntax. `Options.templates_fs` and `Options.assets_fs`
take either a directory path or a mapping from relative names to contents.
Each name passed to a renderer is rendered in turn, and each result becomes
`yield` in the next one. That is how layouts work:

```python
import io
from herdweb.render.engine import Engine
from herdweb.render.options import Options

engine = Engine(Options(
    templates_fs={
        "hello.html": "Hello {{ name }}",
        "layout.html": "<body>{{ yield }}</body>",
    },
    html_layout="layout.html",
))
out = io.BytesIO()
engine.html("hello.html").render(out, {"name": "Mark"})
print(out.getvalue().decode())   # <body>Hello Mark</body>
```

- A template's extensions choose the engines it passes through. `.md` is
  converted by Markdown and then rendered by Jinja. `html`, `plush`, `text`,
  `txt`, `js` and `tmpl` are rendered by Jinja alone.
- `partial("name", {...})` renders `_name`. The extension is added from the
  content type when the name has none. A `layout` local wraps the partial in
  another partial. A custom `partialFeeder` helper can supply partial sources.
- A name containing `.plush.` can also be found without that part. When
  `data["languages"]` is set, for example `["ko-KR", "en"]`, localized
  variants such as `index.ko-kr.html` or `index.ko.html` are tried before the
  default. The last language in the list is the default.
- Asset helpers: `assetPath`, `javascriptTag`, `stylesheetTag` and `imgTag`.
  They map names through `manifest.json` or `assets/manifest.json` in
  `assets_fs`, and return paths under `/assets`. When `APP_ENV` is
  `production` and the manifest has been loaded once, it is not read again.
- When no helpers are given, an engine provides `raw`, `toJSON`, `markdown`
  and `truncate`.

`auto(ctx, model)` reads `ctx.get("contentType")` and falls back to the
engine's default content type. It returns JSON or XML when the content type
names them. Otherwise it returns `HTMLAutoRenderer` from
`herdweb.render.auto`, which chooses a page from the HTTP method and the
current path:

| Request | Page |
| --- | --- |
| `GET /cars` | `cars/index.html` |
| `GET /cars/1` | `cars/show.html` |
| `GET /cars/new` | `cars/new.html` |
| `GET /cars/1/edit` | `cars/edit.html` |

For `POST`, `PUT` and `DELETE`, if the model has an `id` a `RedirectError` is
raised, carrying a status and a URL. Without an `id`, `new.html` is rendered,
or `edit.html` for `PUT`.

## Routes (`herdweb.route`, `herdweb.naming`)

`RouteNamer.name_route` derives a route name from a path:

```python
from herdweb.naming import RouteNamer

namer = RouteNamer()
namer.name_route("/users/{user_id}/children/new")   # "newUserChildren"
namer.name_route("/admin/planes/{plane_id}/edit")   # "editAdminPlane"
```

`herdweb.naming` also has `singularize`, `pluralize`, `underscore`,
`camelize` and `var_case`.

`RouteInfo` describes a route.

- `name(...)` sets `path_name`. The name is camelized and gets a `Path` suffix.
- `build_path_helper()` returns a function that fills `{var}` placeholders,
  and the host when one is set. It raises `ValueError("missing parameters
  for ...")` when a value is missing or does not match the placeholder.

`RouteList.lookup(name)` finds a route by its path name and raises
`LookupError` when there is none. `add_extra_params` appends the options a
path does not already use, as sorted, URL-escaped query parameters:

```python
from herdweb.route import add_extra_params

add_extra_params("/cars/1/edit/", {"car_id": 1, "other": 12})
# "/cars/1/edit/?other=12"
```

## Responses and sessions

`herdweb.response.Response` wraps a writer that has `write_header(code)` and
`write(bytes)`. It records `status` and `size`. It ignores a second, different
status code and logs a warning.

`herdweb.session.Session` holds a values dict and has `get`, `get_once`,
`set`, `delete`, `clear` and `save`. `save` calls the `saver` function given
to the constructor.

## Background jobs (`herdweb.worker`)

```python
from herdweb.worker.job import Job
from herdweb.worker.simple import SimpleWorker

worker = SimpleWorker()
worker.register("greet", lambda args: print("hello", args["name"]))
worker.start()
worker.perform(Job(handler="greet", args={"name": "Mark"}))
worker.stop()
```

- `perform` runs the handler on its own thread.
- `perform_in(job, delay)` takes seconds or a `timedelta`.
  `perform_at(job, when)` takes a `datetime`.
- If a handler raises, the worker logs the error and keeps running.
- `stop` waits for running jobs to finish. After `stop`, the worker refuses
  new jobs with `WorkerError`.
- `perform` also raises `WorkerError` before `start`, for an empty handler
  name, and for an unregistered one.

## Servers (`herdweb.servers`)

- `SimpleServer(addr)` serves a WSGI application on `host:port`.
- `TLSServer(cert_file, key_file, addr)` does the same over TLS.
- `ListenerServer(sock)` serves on a socket that is already listening.
- `unix_socket(path)` returns a `ListenerServer` bound to a Unix domain socket.

`start(app)` blocks until `shutdown(timeout)` is called from another thread.

## Build information (`herdweb.runtime`)

`build()` returns a `BuildInfo`. Its values are zero until `set_build(info)`
is called. Only the first call to `set_build` takes effect. `VERSION` holds
the framework version.

## What herdweb does not do

herdweb has no application object. It does not dispatch requests to route
handlers, has no middleware chain and no cookie-backed session store, and
does not start the worker and servers together. Those pieces are left to the
application that uses these building blocks. There is no command-line tool.