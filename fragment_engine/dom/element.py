"""DOM Element node"""


def parse_style(text):
    """style 속성 문자열을 (속성, 값) 딕셔너리로 변환 (순서 유지)"""
    pairs = {}
    for declaration in text.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip().casefold()
        if prop:
            pairs[prop] = value.strip()
    return pairs


def format_style(pairs):
    return "; ".join(f"{prop}: {value}" for prop, value in pairs.items())


class Element:
    """HTML Element를 나타내는 DOM 노드"""

    def __init__(self, tag, attributes, parent):
        self.tag = tag
        self.attributes = attributes
        self.children = []
        self.parent = parent

    @property
    def id(self):
        return self.attributes.get("id")

    # === class 속성 ===

    def classes(self):
        return self.attributes.get("class", "").split()

    def has_class(self, name):
        return name in self.classes()

    def add_class(self, name):
        classes = self.classes()
        if name not in classes:
            classes.append(name)
            self.attributes["class"] = " ".join(classes)

    def remove_class(self, name):
        classes = self.classes()
        if name in classes:
            classes.remove(name)
            if classes:
                self.attributes["class"] = " ".join(classes)
            else:
                del self.attributes["class"]

    # === style 속성 ===

    def get_style(self, prop):
        return parse_style(self.attributes.get("style", "")).get(prop)

    def set_style(self, prop, value):
        """style 속성에서 prop 하나만 변경 (다른 선언은 유지)"""
        pairs = parse_style(self.attributes.get("style", ""))
        pairs[prop] = value
        self.attributes["style"] = format_style(pairs)

    def __repr__(self) -> str:
        if self.id:
            return f"<{self.tag} id={self.id}>"
        return f"<{self.tag}>"
