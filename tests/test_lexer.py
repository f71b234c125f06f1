#!/usr/bin/env python3
"""
Tests for the WGSL lexer.

This module contains unit tests for tokenization and serialization defined in
aetherfuzz/lexer.py
"""

import unittest

from aetherfuzz.lexer import SYNTHETIC_OFFSET, Token, TokenKind, serialize, synthetic, tokenize
from aetherfuzz.presets import PRESETS, WGSL_PREAMBLE


def kinds_and_text(source):
    return [(t.kind, t.text) for t in tokenize(source)]


class TestRoundTrip(unittest.TestCase):
    """Serializing the tokens of any input gives the input back."""

    def test_presets_round_trip(self):
        for preset in PRESETS:
            with self.subTest(preset=preset.name):
                self.assertEqual(serialize(tokenize(preset.code)), preset.code)

    def test_preamble_round_trips(self):
        self.assertEqual(serialize(tokenize(WGSL_PREAMBLE)), WGSL_PREAMBLE)

    def test_odd_input_round_trips(self):
        sources = [
            "",
            "   ",
            "@@@ $$ %^&|!~",
            "x = 1.0e3 + 0xFF - 3u * .5; // trailing comment",
            "/* unterminated block comment",
            '"unterminated string',
            "café ☃ \t\r\n",
            "a->b==c!=d<=e>=f&&g||h",
        ]
        for source in sources:
            with self.subTest(source=source):
                self.assertEqual(serialize(tokenize(source)), source)

    def test_offsets_point_into_source(self):
        source = "let col = vec3<f32>(uv.x, 0.5, 1.0);"
        for token in tokenize(source):
            self.assertEqual(source[token.offset : token.offset + len(token.text)], token.text)


class TestClassification(unittest.TestCase):
    """Tokens are classified by the first pattern that matches."""

    def test_arrow_is_single_punctuation(self):
        self.assertEqual(
            kinds_and_text("a->b"),
            [
                (TokenKind.IDENTIFIER, "a"),
                (TokenKind.PUNCTUATION, "->"),
                (TokenKind.IDENTIFIER, "b"),
            ],
        )

    def test_multi_char_operators(self):
        for op in ["==", "!=", "<=", ">=", "&&", "||"]:
            with self.subTest(op=op):
                tokens = tokenize(f"a{op}b")
                self.assertEqual(len(tokens), 3)
                self.assertEqual(tokens[1], Token(TokenKind.PUNCTUATION, op, 1))

    def test_number_forms(self):
        for literal in ["0x1F", "1.5", "1.5e-3", "2.0E+4", "1.", ".5", ".5e2", "42", "3u"]:
            with self.subTest(literal=literal):
                tokens = tokenize(literal)
                self.assertEqual(len(tokens), 1)
                self.assertIs(tokens[0].kind, TokenKind.NUMBER)

    def test_member_access(self):
        self.assertEqual(
            kinds_and_text("uv.xy"),
            [
                (TokenKind.IDENTIFIER, "uv"),
                (TokenKind.PUNCTUATION, "."),
                (TokenKind.IDENTIFIER, "xy"),
            ],
        )

    def test_comments_and_whitespace(self):
        self.assertEqual(
            kinds_and_text("// note\n  /* block */x"),
            [
                (TokenKind.COMMENT, "// note"),
                (TokenKind.WHITESPACE, "\n  "),
                (TokenKind.COMMENT, "/* block */"),
                (TokenKind.IDENTIFIER, "x"),
            ],
        )

    def test_string_literal(self):
        self.assertEqual(kinds_and_text('"a\\"b"'), [(TokenKind.STRING, '"a\\"b"')])

    def test_unmatched_characters_are_single_unknown_tokens(self):
        tokens = tokenize("@fragment")
        self.assertEqual(tokens[0], Token(TokenKind.UNKNOWN, "@", 0))
        self.assertEqual(tokens[1].text, "fragment")
        self.assertEqual([t.kind for t in tokenize("!&")], [TokenKind.UNKNOWN] * 2)

    def test_generic_brackets_are_punctuation(self):
        texts = [t.text for t in tokenize("vec4<f32>")]
        self.assertEqual(texts, ["vec4", "<", "f32", ">"])

    def test_tokenize_is_deterministic(self):
        source = PRESETS[2].code
        self.assertEqual(tokenize(source), tokenize(source))


class TestSynthetic(unittest.TestCase):
    """Generated code is marked with the synthetic offset."""

    def test_synthetic_tokens_have_sentinel_offset(self):
        tokens = synthetic("var a = 1.0;")
        self.assertEqual(serialize(tokens), "var a = 1.0;")
        self.assertTrue(all(t.offset == SYNTHETIC_OFFSET for t in tokens))


if __name__ == "__main__":
    unittest.main()
