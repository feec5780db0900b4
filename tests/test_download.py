import io
from types import SimpleNamespace
from wsgiref.headers import Headers

import pytest

from herdweb.render.download import download
from herdweb.render.renderer import RenderError

DATA = b"data"


@pytest.fixture
def ctx():
    return SimpleNamespace(response=SimpleNamespace(headers=Headers()))


def test_download_known_extension(ctx):
    re = download(ctx, "filename.pdf", io.BytesIO(DATA))
    bb = io.BytesIO()
    re.render(bb, None)

    assert bb.getvalue() == DATA
    assert ctx.response.headers["Content-Length"] == str(len(DATA))
    assert ctx.response.headers["Content-Disposition"] == "attachment; filename=filename.pdf"
    assert re.content_type == "application/pdf"


def test_download_unknown_extension(ctx):
    re = download(ctx, "filename", io.BytesIO(DATA))
    bb = io.BytesIO()
    re.render(bb, None)

    assert bb.getvalue() == DATA
    assert ctx.response.headers["Content-Length"] == str(len(DATA))
    assert ctx.response.headers["Content-Disposition"] == "attachment; filename=filename"
    assert re.content_type == "application/octet-stream"


def test_download_plain_dict_headers():
    headers = {}
    context = SimpleNamespace(response=SimpleNamespace(headers=headers))
    download(context, "report", io.BytesIO(DATA)).render(io.BytesIO())
    assert headers["Content-Length"] == str(len(DATA))


def test_invalid_context():
    re = download(object(), "filename", io.BytesIO(DATA))
    with pytest.raises(RenderError):
        re.render(io.BytesIO(), None)