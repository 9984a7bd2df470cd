"""
A crude HTML to text filter: keep what is inside `<body>`, drop the tags, and
unescape the two entities that matter for reading source.
"""


def lex(html: str) -> str:
    return replace_entities(remove_tags(get_body(html)))


def get_body(html: str) -> str:
    """
    The content between `<body>` and `</body>`, or all of `html` if there is no body tag. The closing tag is optional.
    """
    start = html.find('<body>')
    if start < 0:
        return html
    start += len('<body>')

    end = html.find('</body>', start)
    return html[start:] if end < 0 else html[start:end]


def remove_tags(html: str) -> str:
    result = []
    in_tag = False
    for c in html:
        if c == '<':
            in_tag = True
        elif c == '>':
            in_tag = False
        elif not in_tag:
            result.append(c)
    return ''.join(result)


def replace_entities(text: str) -> str:
    return text.replace('&lt;', '<').replace('&gt;', '>')
