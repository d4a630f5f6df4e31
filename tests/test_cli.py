import io

import pytest

from htmlscope.__main__ import main

PAGE = """<!DOCTYPE html>
<html><body>
<ul><li><a href="/one">One</a></li><li><a>Two</a></li></ul>
</body></html>
"""


@pytest.fixture
def page(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE)
    return str(path)


def test_selector_html_output(page, capsys):
    main([page, "--selector", "li > a"])
    assert capsys.readouterr().out == '<a href="/one">One</a>\n<a>Two</a>\n'


def test_inner_and_text_formats(page, capsys):
    main([page, "--selector", "ul", "--format", "inner"])
    assert capsys.readouterr().out == '<li><a href="/one">One</a></li><li><a>Two</a></li>\n'

    main([page, "--selector", "li", "--format", "text", "--separator", "|"])
    assert capsys.readouterr().out == "One\nTwo\n"


def test_first_match(page, capsys):
    main([page, "--selector", "a", "--format", "attr", "--attr", "href", "--first"])
    assert capsys.readouterr().out == "/one\n"


def test_first_without_match_explains_why(page, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([page, "--selector", "table", "--first"])
    assert excinfo.value.code == 1
    assert "table" in capsys.readouterr().err


def test_no_match_exits_with_one(page, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([page, "--selector", "table"])
    assert excinfo.value.code == 1
    assert capsys.readouterr().out == ""


def test_missing_attribute(page, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([page, "--selector", "a", "--format", "attr", "--attr", "href"])
    assert excinfo.value.code == 1
    assert "href" in capsys.readouterr().err


def test_invalid_selector(page, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([page, "--selector", "ul >"])
    assert excinfo.value.code == 2
    assert "Expected selector" in capsys.readouterr().err


def test_attr_format_requires_attr_name(page):
    with pytest.raises(SystemExit) as excinfo:
        main([page, "--format", "attr"])
    assert excinfo.value.code == 2


def test_fragment_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("<b>1</b><b>2</b>"))
    main(["-", "--fragment"])
    assert capsys.readouterr().out == "<html><b>1</b><b>2</b></html>\n"


def test_missing_path_prints_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().err
