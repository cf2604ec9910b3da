from treelox.scanner import Scanner, scan
from treelox.tokens import TokenType


def types(source):
    tokens, errors = scan(source)
    assert errors == []
    return [t.type for t in tokens]


def test_ends_with_eof():
    tokens, errors = scan('')
    assert errors == []
    assert [t.type for t in tokens] == [TokenType.EOF]


def test_operators_use_maximal_munch():
    assert types('! != = == < <= > >= ? :') == [
        TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.QUESTION, TokenType.COLON, TokenType.EOF,
    ]


def test_keywords_override_identifiers():
    tokens, _ = scan('var variable fun fun_ nil orchid or')
    assert [(t.type, t.lexeme) for t in tokens[:-1]] == [
        (TokenType.VAR, 'var'),
        (TokenType.IDENTIFIER, 'variable'),
        (TokenType.FUN, 'fun'),
        (TokenType.IDENTIFIER, 'fun_'),
        (TokenType.NIL, 'nil'),
        (TokenType.IDENTIFIER, 'orchid'),
        (TokenType.OR, 'or'),
    ]


def test_numbers_are_floats():
    tokens, _ = scan('123 4.5 0.25')
    assert [t.literal for t in tokens[:-1]] == [123.0, 4.5, 0.25]
    assert all(isinstance(t.literal, float) for t in tokens[:-1])


def test_trailing_dot_is_not_part_of_number():
    assert types('12.') == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]


def test_string_escapes_are_decoded():
    tokens, errors = scan(r'"He said, \"Go home.\"\nShe did."')
    assert errors == []
    assert tokens[0].type is TokenType.STRING
    assert tokens[0].literal == 'He said, "Go home."\nShe did.'


def test_comments_and_whitespace_are_skipped():
    assert types('// nothing here\n  \t\r\n') == [TokenType.EOF]


def test_newlines_advance_line_numbers():
    tokens, _ = scan('a\nb\n\nc')
    assert [t.line for t in tokens] == [1, 2, 4, 4]


def test_multiline_string_reports_start_line():
    tokens, _ = scan('"one\ntwo" x')
    assert tokens[0].literal == 'one\ntwo'
    assert tokens[0].line == 1
    assert tokens[1].line == 2


def test_unterminated_string_reports_line_it_began():
    _, errors = scan('print 1;\n"never\nclosed')
    assert len(errors) == 1
    assert errors[0].line == 2
    assert 'Unterminated string' in errors[0].message


def test_unknown_characters_do_not_stop_scanning():
    tokens, errors = scan('var a = 1 @ 2;\nprint # a;')
    assert [e.line for e in errors] == [1, 2]
    assert all(e.report.kind == 'LexicalError' for e in errors)
    assert TokenType.PRINT in [t.type for t in tokens]


def test_invalid_escape_is_an_error():
    tokens, errors = scan(r'"bad \q escape" 1')
    assert len(errors) == 1
    assert 'escape' in errors[0].message
    # the rest of the input is still scanned
    assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.EOF]


def test_tokens_are_produced_lazily():
    scanner = Scanner('1 2 $')
    stream = scanner.tokens()
    first = next(stream)
    assert first.literal == 1.0
    assert scanner.errors == []
    rest = list(stream)
    assert rest[-1].type is TokenType.EOF
    assert len(scanner.errors) == 1
