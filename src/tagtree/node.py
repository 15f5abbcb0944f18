import enum

from .constants import ASCII_LOWER_TABLE


class NodeType(enum.IntEnum):
    ELEMENT = 1
    TEXT = 3
    COMMENT = 8
    DOCUMENT = 9
    DOCUMENT_TYPE = 10


class Node:
    """Base class of the document tree.

    - name: node name; the tag name for elements, '#text', '#comment' and
      '#document' for the other kinds, the doctype name for doctypes
    - children: list of child Nodes (always empty for leaf nodes)
    - parent: reference to parent Node (or None for a detached node or the document)
    - next_sibling/previous_sibling: references to adjacent nodes in the tree.
    """

    __slots__ = ("children", "name", "next_sibling", "parent", "previous_sibling")

    node_type = None
    can_have_children = True

    def __init__(self, name):
        self.name = name
        self.children = []
        self.parent = None
        self.next_sibling = None
        self.previous_sibling = None

    def append_child(self, child):
        self._check_insertable(child)
        if child.parent is not None:
            child.parent.remove_child(child)

        if self.children:
            last = self.children[-1]
            last.next_sibling = child
            child.previous_sibling = last
        else:
            child.previous_sibling = None

        child.parent = self
        child.next_sibling = None
        self.children.append(child)
        return child

    def insert_before(self, new_node, reference_node):
        if reference_node is None:
            return self.append_child(new_node)
        if reference_node.parent is not self:
            return None

        self._check_insertable(new_node)
        if new_node is reference_node:
            return new_node
        if new_node.parent is not None:
            new_node.parent.remove_child(new_node)

        idx = self.children.index(reference_node)
        new_node.parent = self
        self.children.insert(idx, new_node)

        # Update sibling pointers
        new_node.next_sibling = reference_node
        new_node.previous_sibling = reference_node.previous_sibling
        reference_node.previous_sibling = new_node
        if new_node.previous_sibling:
            new_node.previous_sibling.next_sibling = new_node
        return new_node

    def remove_child(self, child):
        """Detach ``child``, updating all sibling links.

        Returns the removed node, or None when ``child`` is not a child of this node.
        """
        if child.parent is not self:
            return None

        if child.previous_sibling:
            child.previous_sibling.next_sibling = child.next_sibling
        if child.next_sibling:
            child.next_sibling.previous_sibling = child.previous_sibling

        self.children.remove(child)
        child.parent = None
        child.next_sibling = None
        child.previous_sibling = None
        return child

    def _check_insertable(self, child):
        if not self.can_have_children:
            msg = f"{self.name} nodes cannot have children"
            raise ValueError(msg)
        if child.node_type == NodeType.DOCUMENT:
            msg = "A document cannot be inserted into another node"
            raise ValueError(msg)

        # Self or one of its ancestors being the new child would create a cycle
        current = self
        while current is not None:
            if current is child:
                msg = f"Adding {child.name} as child of {self.name} would create circular reference"
                raise ValueError(msg)
            current = current.parent

    def clone_node(self, deep=False):
        clone = self._shallow_clone()
        if deep:
            for child in self.children:
                clone.append_child(child.clone_node(deep=True))
        return clone

    def _shallow_clone(self):
        raise NotImplementedError

    @property
    def text_content(self):
        parts = []
        for node in self.iter_descendants():
            if node.node_type == NodeType.TEXT:
                parts.append(node.data)
        return "".join(parts)

    @property
    def element_children(self):
        return [child for child in self.children if child.node_type == NodeType.ELEMENT]

    @property
    def first_element_child(self):
        for child in self.children:
            if child.node_type == NodeType.ELEMENT:
                return child
        return None

    @property
    def last_element_child(self):
        for child in reversed(self.children):
            if child.node_type == NodeType.ELEMENT:
                return child
        return None

    def iter_descendants(self):
        """Yield every descendant in document order, excluding this node."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def iter_elements(self):
        for node in self.iter_descendants():
            if node.node_type == NodeType.ELEMENT:
                yield node

    def query_selector(self, selector):
        from .selector import query

        return query(self, selector)

    def query_selector_all(self, selector):
        from .selector import query_all

        return query_all(self, selector)

    def get_elements_by_tag_name(self, tag_name):
        """Descendant elements named ``tag_name`` (ASCII case-insensitive, '*' matches all)."""
        target = tag_name.translate(ASCII_LOWER_TABLE)
        if target == "*":
            return list(self.iter_elements())
        return [node for node in self.iter_elements() if node.tag_name == target]

    def get_elements_by_class_name(self, class_name):
        wanted = class_name.split()
        if not wanted:
            return []
        found = []
        for node in self.iter_elements():
            classes = node.class_list
            if all(name in classes for name in wanted):
                found.append(node)
        return found

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, children={len(self.children)})"


class Element(Node):
    __slots__ = ("attributes",)

    node_type = NodeType.ELEMENT

    def __init__(self, tag_name, attributes=None):
        if not tag_name:
            msg = "Empty tag_name passed to Element constructor"
            raise ValueError(msg)
        super().__init__(tag_name)
        self.attributes = dict(attributes) if attributes else {}

    @property
    def tag_name(self):
        return self.name

    def get_attribute(self, name, default=None):
        return self.attributes.get(name.translate(ASCII_LOWER_TABLE), default)

    def set_attribute(self, name, value):
        self.attributes[name.translate(ASCII_LOWER_TABLE)] = "" if value is None else str(value)

    def has_attribute(self, name):
        return name.translate(ASCII_LOWER_TABLE) in self.attributes

    def remove_attribute(self, name):
        self.attributes.pop(name.translate(ASCII_LOWER_TABLE), None)

    @property
    def id(self):
        return self.attributes.get("id", "")

    @property
    def class_list(self):
        return self.attributes.get("class", "").split()

    @property
    def next_element_sibling(self):
        node = self.next_sibling
        while node is not None and node.node_type != NodeType.ELEMENT:
            node = node.next_sibling
        return node

    @property
    def previous_element_sibling(self):
        node = self.previous_sibling
        while node is not None and node.node_type != NodeType.ELEMENT:
            node = node.previous_sibling
        return node

    @property
    def inner_html(self):
        from .serialize import to_html

        return "".join(to_html(child, pretty=False) for child in self.children)

    @property
    def outer_html(self):
        from .serialize import to_html

        return to_html(self, pretty=False)

    def set_text_content(self, text):
        for child in list(self.children):
            self.remove_child(child)
        if text:
            self.append_child(Text(text))

    def _shallow_clone(self):
        return Element(self.name, self.attributes)

    def __repr__(self):
        return f"Element(<{self.name}>, children={len(self.children)})"


class Text(Node):
    __slots__ = ("data",)

    node_type = NodeType.TEXT
    can_have_children = False

    def __init__(self, data=""):
        super().__init__("#text")
        self.data = data

    def append_data(self, data):
        self.data += data

    @property
    def text_content(self):
        return self.data

    def _shallow_clone(self):
        return Text(self.data)

    def __repr__(self):
        return f"Text({self.data[:30]!r})"


class Comment(Node):
    __slots__ = ("data",)

    node_type = NodeType.COMMENT
    can_have_children = False

    def __init__(self, data=""):
        super().__init__("#comment")
        self.data = data

    @property
    def text_content(self):
        return ""

    def _shallow_clone(self):
        return Comment(self.data)

    def __repr__(self):
        return f"Comment({self.data[:30]!r})"


class DocumentType(Node):
    __slots__ = ("public_id", "system_id")

    node_type = NodeType.DOCUMENT_TYPE
    can_have_children = False

    def __init__(self, name, public_id="", system_id=""):
        super().__init__(name)
        self.public_id = public_id
        self.system_id = system_id

    @property
    def text_content(self):
        return ""

    def _shallow_clone(self):
        return DocumentType(self.name, self.public_id, self.system_id)

    def __repr__(self):
        return f"DocumentType({self.name!r})"


class Document(Node):
    """Root of a parsed tree.

    Holds an optional DocumentType followed by the ``html`` element. Besides
    the node factories it offers the lookups a page loader needs: title,
    element by id, and the stylesheet, inline style, script and image
    references found in the tree.
    """

    __slots__ = ()

    node_type = NodeType.DOCUMENT

    def __init__(self):
        super().__init__("#document")

    def create_element(self, tag_name, attributes=None):
        return Element(tag_name, attributes)

    def create_text_node(self, data):
        return Text(data)

    def create_comment(self, data):
        return Comment(data)

    def create_document_type(self, name, public_id="", system_id=""):
        return DocumentType(name, public_id, system_id)

    @property
    def doctype(self):
        for child in self.children:
            if child.node_type == NodeType.DOCUMENT_TYPE:
                return child
        return None

    @property
    def document_element(self):
        return self.first_element_child

    def _first_element(self, tag_name):
        for node in self.iter_elements():
            if node.name == tag_name:
                return node
        return None

    @property
    def head(self):
        return self._first_element("head")

    @property
    def body(self):
        return self._first_element("body")

    @property
    def title(self):
        head = self.head
        if head is None:
            return ""
        for child in head.element_children:
            if child.name == "title":
                return child.text_content
        return ""

    @title.setter
    def title(self, value):
        root = self.document_element
        if root is None:
            return
        head = self.head
        if head is None:
            head = root.insert_before(Element("head"), root.first_element_child)
        title = None
        for child in head.element_children:
            if child.name == "title":
                title = child
                break
        if title is None:
            title = head.append_child(Element("title"))
        title.set_text_content(value)

    def get_element_by_id(self, element_id):
        if not element_id:
            return None
        for node in self.iter_elements():
            if node.attributes.get("id") == element_id:
                return node
        return None

    def find_stylesheet_links(self):
        """Return the href of every <link rel="stylesheet"> in document order."""
        links = []
        for link in self.get_elements_by_tag_name("link"):
            rel = link.get_attribute("rel", "").lower().split()
            href = link.get_attribute("href")
            if "stylesheet" in rel and href:
                links.append(href)
        return links

    def find_inline_styles(self):
        return [style.text_content for style in self.get_elements_by_tag_name("style")]

    def find_script_sources(self):
        return [script.get_attribute("src") for script in self.get_elements_by_tag_name("script") if script.get_attribute("src")]

    def find_image_sources(self):
        return [img.get_attribute("src") for img in self.get_elements_by_tag_name("img") if img.get_attribute("src")]

    def traverse(self, callback):
        """Call ``callback`` on the document and then on every descendant, in document order."""
        callback(self)
        for node in self.iter_descendants():
            callback(node)

    def _shallow_clone(self):
        return Document()

    def __repr__(self):
        return f"Document(children={len(self.children)})"
