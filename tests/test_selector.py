import pytest

from htmlscope import Html, Selector, SelectorError


def _names(html, selector):
    doc = Html.parse_fragment(html)
    return [e.value.attr("id") or e.name for e in doc.query(selector)]


class TestParse:
    @pytest.mark.parametrize(
        "text",
        ["", "   ", "div >", "> b", "a,", "[x", "[x~y]", ":nope", ":nth-child(x)", ":not()", "a $ b", "#"],
    )
    def test_invalid_selectors_raise(self, text):
        with pytest.raises(SelectorError):
            Selector.parse(text)

    def test_selector_error_is_value_error(self):
        with pytest.raises(ValueError):
            Selector.parse("div >")

    def test_equality_and_str(self):
        assert Selector.parse("div > p") == Selector.parse("div > p")
        assert Selector.parse("div > p") != Selector.parse("div p")
        assert hash(Selector.parse("a")) == hash(Selector.parse("a"))
        assert str(Selector.parse(":scope > b")) == ":scope > b"


class TestMatching:
    HTML = (
        '<ul id="list">'
        '<li id="one" class="item first" lang="en-US">1</li>'
        '<li id="two" class="item" data-x="abc">2</li>'
        '<li id="three" class="item last">3</li>'
        "</ul>"
        '<p id="para"></p>'
    )

    def test_type_id_class(self):
        assert _names(self.HTML, "li") == ["one", "two", "three"]
        assert _names(self.HTML, "#two") == ["two"]
        assert _names(self.HTML, ".item.last") == ["three"]
        assert _names(self.HTML, "LI.first") == ["one"]

    def test_attributes(self):
        assert _names(self.HTML, "[data-x]") == ["two"]
        assert _names(self.HTML, "[data-x=abc]") == ["two"]
        assert _names(self.HTML, '[data-x^="ab"]') == ["two"]
        assert _names(self.HTML, "[data-x$=bc]") == ["two"]
        assert _names(self.HTML, "[data-x*=b]") == ["two"]
        assert _names(self.HTML, "[class~=last]") == ["three"]
        assert _names(self.HTML, "[lang|=en]") == ["one"]
        assert _names(self.HTML, "[data-x^='']") == []

    def test_combinators(self):
        assert _names(self.HTML, "ul > li") == ["one", "two", "three"]
        assert _names(self.HTML, "html li#two") == ["two"]
        assert _names(self.HTML, "#one + li") == ["two"]
        assert _names(self.HTML, "#one ~ li") == ["two", "three"]
        assert _names(self.HTML, "ul + p") == ["para"]
        assert _names(self.HTML, "p > li") == []

    def test_selector_list_keeps_document_order(self):
        assert _names(self.HTML, "p, #one") == ["one", "para"]

    def test_structural_pseudo_classes(self):
        assert _names(self.HTML, "li:first-child") == ["one"]
        assert _names(self.HTML, "li:last-child") == ["three"]
        assert _names(self.HTML, "li:nth-child(2)") == ["two"]
        assert _names(self.HTML, "li:nth-child(odd)") == ["one", "three"]
        assert _names(self.HTML, "li:nth-of-type(2n)") == ["two"]
        assert _names(self.HTML, "p:only-of-type") == ["para"]
        assert _names(self.HTML, "li:not(.item)") == []
        assert _names(self.HTML, "li:not(#two)") == ["one", "three"]
        assert _names(self.HTML, ":empty") == ["para"]

    def test_root_and_unscoped_scope(self):
        assert _names(self.HTML, ":root") == ["html"]
        assert _names(self.HTML, ":scope > ul") == ["list"]

    def test_scope_argument_anchors_scope(self):
        doc = Html.parse_fragment("<div><b>1</b><span><b>2</b></span></div>")
        span = doc.query("span").try_next()
        b2 = span.query("b").try_next()
        selector = Selector.parse(":scope > b")
        assert selector.matches(b2.node, span.node)
        assert not selector.matches(b2.node, doc.root_element().node)

    def test_non_elements_never_match(self):
        doc = Html.parse_fragment("text")
        text_node = doc.root_element().children[0]
        assert not Selector.parse("*").matches(text_node)
