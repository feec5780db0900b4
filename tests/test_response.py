from herdweb.response import Response


class Recorder:
    def __init__(self):
        self.codes = []
        self.body = b""
        self.headers = {}
        self.flushed = 0

    def write_header(self, code):
        self.codes.append(code)

    def write(self, data):
        self.body += data
        return len(data)

    def flush(self):
        self.flushed += 1


def test_response_multiple_write_header():
    recorder = Recorder()
    res = Response(recorder)
    res.write_header(200)
    res.write_header(500)
    assert res.status == 200
    assert recorder.codes == [200]


def test_same_status_written_once():
    recorder = Recorder()
    res = Response(recorder)
    res.write_header(404)
    res.write_header(404)
    assert recorder.codes == [404]


def test_write_records_size():
    recorder = Recorder()
    res = Response(recorder)
    assert res.write(b"hello") == 5
    assert res.size == 5
    assert recorder.body == b"hello"


def test_flush_and_headers_pass_through():
    recorder = Recorder()
    res = Response(recorder)
    res.headers["X-Test"] = "1"
    res.flush()
    assert recorder.flushed == 1
    assert recorder.headers == {"X-Test": "1"}


def test_flush_without_flushable_writer():
    class Plain:
        def write_header(self, code):
            pass

        def write(self, data):
            return len(data)

    res = Response(Plain())
    res.flush()
    assert res.status == 0