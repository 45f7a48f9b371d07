from visible_copy.dom.models import NodeKind
from visible_copy.dom.serializer import outer_html
from visible_copy.dom.tree import NodeTree


def test_escapes_text_and_attributes():
    tree = NodeTree()
    link = tree.create_element("a", {"title": 'say "hi" & go'}, text="1 < 2 & 3 > 2")

    assert outer_html(tree, link) == '<a title="say &quot;hi&quot; &amp; go">1 &lt; 2 &amp; 3 &gt; 2</a>'


def test_non_breaking_spaces_are_written_as_entities():
    tree = NodeTree()
    cell = tree.create_element("td", {"title": "a\xa0b"}, text="10\xa0kg")

    assert outer_html(tree, cell) == '<td title="a&nbsp;b">10&nbsp;kg</td>'


def test_void_and_raw_text_elements():
    tree = NodeTree()
    div = tree.create_element("div")
    tree.append_child(div, tree.create_element("img", {"src": "a.png"}))
    tree.append_child(div, tree.create_element("br"))
    tree.append_child(div, tree.create_element("style", text="a > b { color: red }"))
    tree.append_child(div, tree.create_node(NodeKind.COMMENT, text=" note "))

    assert outer_html(tree, div) == (
        '<div><img src="a.png"><br><style>a > b { color: red }</style><!-- note --></div>'
    )


def test_id_attribute_tags_every_element():
    tree = NodeTree()
    div = tree.create_element("div")
    span = tree.append_child(div, tree.create_element("span", text="x"))

    assert outer_html(tree, div, id_attribute="data-vc-id") == (
        f'<div data-vc-id="{div}"><span data-vc-id="{span}">x</span></div>'
    )
