import io

from spacecli.prefixer import Prefixer


def test_write_prefixes_each_line():
    out = io.StringIO()
    prefixer = Prefixer("web", out)
    assert prefixer.write(b"a\r\nb") == 4
    assert out.getvalue() == "[web] a\n[web] b\n"


def test_write_accepts_text():
    out = io.StringIO()
    assert Prefixer("api", out).write("hello") == 5
    assert out.getvalue() == "[api] hello\n"


def test_every_output_line_has_prefix():
    out = io.StringIO()
    Prefixer("x", out).write(b"one\ntwo\nthree")
    lines = out.getvalue().splitlines()
    assert len(lines) == 3
    assert all(line.startswith("[x] ") for line in lines)