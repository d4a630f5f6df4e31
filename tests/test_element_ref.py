import pytest

from htmlscope import (
    AttrNotFoundError,
    ElementNotFoundError,
    ElementRef,
    Html,
    Selector,
    TextNode,
    TextNotFoundError,
)


def _root(html):
    return Html.parse_fragment(html).root_element()


class TestWrap:
    def test_wraps_elements_only(self):
        root = _root("foo<span>bar</span>")
        text, span = root.children
        assert ElementRef.wrap(text) is None
        wrapped = ElementRef.wrap(span)
        assert wrapped is not None
        assert wrapped.value is span
        assert wrapped.name == "span"

    def test_equality_is_node_identity(self):
        root = _root("<p></p><p></p>")
        first, second = root.children
        assert ElementRef.wrap(first) == ElementRef.wrap(first)
        assert ElementRef.wrap(first) != ElementRef.wrap(second)
        assert len({ElementRef.wrap(first), ElementRef.wrap(first)}) == 1

    def test_broken_invariant_is_a_programming_error(self):
        bogus = ElementRef(TextNode("x"))
        with pytest.raises(AssertionError):
            bogus.value

    def test_navigation(self):
        root = _root("<ul><li>x</li></ul>")
        li = root.query("li").try_next()
        assert li.parent_element().name == "ul"
        assert li.parent is li.parent_element().node
        assert root.parent_element() is None
        assert [n.name for n in li.descendants()] == ["li", "#text"]


class TestAttributes:
    def test_try_attr_matches_attr_when_present(self):
        link = _root('<a href="/x" title="">t</a>').query("a").try_next()
        assert link.try_attr("href") == link.attr("href") == "/x"
        assert link.try_attr("title") == ""

    def test_try_attr_reports_element_and_name(self):
        link = _root('<a href="/x">t</a>').query("a").try_next()
        assert link.attr("rel") is None
        with pytest.raises(AttrNotFoundError) as excinfo:
            link.try_attr("rel")
        assert excinfo.value.element == link
        assert excinfo.value.attr == "rel"
        assert "rel" in str(excinfo.value)


class TestQuery:
    SCOPE_HTML = """
        <div>
            <b>1</b>
            <span>
                <span><b>2</b></span>
                <b>3</b>
            </span>
        </div>
    """

    def test_scope_is_the_query_anchor(self):
        fragment = Html.parse_fragment(self.SCOPE_HTML)
        outer_span = fragment.query(Selector.parse("div > span")).try_next()
        matches = list(outer_span.query(Selector.parse(":scope > b")))
        assert [m.inner_html() for m in matches] == ["3"]

    def test_scope_without_whitespace(self):
        fragment = Html.parse_fragment("<div><b>1</b><span><span><b>2</b></span><b>3</b></span></div>")
        outer_span = fragment.query("div > span").try_next()
        assert [b.inner_html() for b in outer_span.query(":scope > b")] == ["3"]

    def test_anchor_is_never_yielded(self):
        root = _root("<div id='a'><div id='b'><div id='c'></div></div></div>")
        outer = root.query("div").try_next()
        assert outer.attr("id") == "a"
        assert [d.attr("id") for d in outer.query("div")] == ["b", "c"]
        assert outer not in list(outer.query("*"))

    def test_anchor_is_found_from_an_ancestor(self):
        root = _root("<div id='a'><div id='b'></div></div>")
        outer = root.query("#a").try_next()
        assert list(outer.query("#a")) == []
        assert [d.attr("id") for d in root.query("#a")] == ["a"]

    def test_results_in_document_order(self):
        root = _root("<p><a></a><b><c></c></b><d></d></p>")
        assert [e.name for e in root.query("*")] == ["p", "a", "b", "c", "d"]

    def test_exhausted_query_stays_exhausted(self):
        query = _root("<b></b><b></b>").query("b")
        assert len(list(query)) == 2
        for _ in range(3):
            assert next(query, None) is None
        assert query.index == 2

    def test_try_next_error_carries_context(self):
        root = _root("<b></b>")
        selector = Selector.parse("b")
        query = root.query(selector)
        assert query.try_next().name == "b"
        with pytest.raises(ElementNotFoundError) as excinfo:
            query.try_next()
        error = excinfo.value
        assert error.scope == root
        assert error.selector == selector
        assert error.index == 1

    def test_string_selectors_are_compiled(self):
        assert _root("<i></i>").query("i").selector == Selector.parse("i")


class TestText:
    def test_yields_text_in_document_order(self):
        root = _root("<p>a<b>b</b><!--x-->c</p>")
        assert list(root.text()) == ["a", "b", "c"]

    def test_exhausted_text_stays_exhausted(self):
        text = _root("<p>a</p>").text()
        assert list(text) == ["a"]
        assert next(text, None) is None
        assert next(text, None) is None

    def test_try_next_error_carries_root_and_count(self):
        root = _root("<p>a</p>")
        text = root.text()
        assert text.try_next() == "a"
        with pytest.raises(TextNotFoundError) as excinfo:
            text.try_next()
        assert excinfo.value.root is root.node
        assert excinfo.value.index == 1


class TestChildAndDescendantElements:
    def test_child_elements_skip_text(self):
        fragment = Html.parse_fragment("foo<span>bar</span><a>baz</a>qux")
        children = [e.name for e in fragment.root_element().child_elements()]
        assert children == ["span", "a"]

    def test_descendant_elements_start_with_anchor(self):
        fragment = Html.parse_fragment("foo<span><b>bar</b></span><a><i>baz</i></a>qux")
        descendants = [e.name for e in fragment.root_element().descendant_elements()]
        assert descendants == ["html", "span", "b", "a", "i"]

    def test_child_elements_exclude_anchor(self):
        root = _root("<div><div></div></div>")
        outer = root.query("div").try_next()
        assert outer not in list(outer.child_elements())
        assert list(outer.descendant_elements())[0] == outer


class TestHtml:
    def test_outer_and_inner_html(self):
        div = _root("<div class='x'><p>hi</p></div>").query("div").try_next()
        assert div.outer_html() == '<div class="x"><p>hi</p></div>'
        assert div.inner_html() == "<p>hi</p>"

    def test_inner_html_excludes_own_tags(self):
        for div in _root("<div><div>x</div></div>").query("div"):
            assert div.outer_html().startswith("<div>")
            assert div.outer_html().endswith("</div>")
        inner = _root("<section><p>x</p></section>").query("section").try_next().inner_html()
        assert "<section" not in inner and "</section>" not in inner

    def test_outer_html_round_trips(self):
        source = '<div class="x" data-q="a&quot;b">a &amp; b&nbsp;<br><script>if (a < b) {}</script><!--c--></div>'
        div = _root(source).query("div").try_next()
        first = div.outer_html()
        assert first == source

        reparsed = _root(first).query("div").try_next()
        assert reparsed.outer_html() == first

