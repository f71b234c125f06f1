#!/usr/bin/env python3
"""
Tests for the anchor locator.

This module contains unit tests for the landmark queries defined in
aetherfuzz/anchors.py
"""

import unittest
from textwrap import dedent

from aetherfuzz.anchors import (
    find_body_start,
    find_coord_name,
    find_entry_function,
    find_last_return,
    find_matching_paren,
    find_parameter_list,
)
from aetherfuzz.lexer import serialize, tokenize

FRAGMENT = dedent("""
    fn helper(x: f32) -> f32 { return x * 2.0; }

    @fragment
    fn main(@builtin(position) pos : vec4<f32>, @location(0) coord : vec2<f32>) -> @location(0) vec4<f32> {
        let col = vec3<f32>(coord.x, coord.y, 0.5);
        return vec4<f32>(col, 1.0);
    }
""")


class TestEntryFunction(unittest.TestCase):
    """Locating `fn main`."""

    def test_finds_main_not_first_fn(self):
        tokens = tokenize(FRAGMENT)
        index = find_entry_function(tokens)
        self.assertIsNotNone(index)
        self.assertEqual(tokens[index].text, "fn")
        self.assertEqual(serialize(tokens[index : index + 3]), "fn main")

    def test_missing_main(self):
        self.assertIsNone(find_entry_function(tokenize("fn helper() {}")))

    def test_main_must_follow_fn(self):
        self.assertIsNone(find_entry_function(tokenize("let main = 1.0; fn other() {}")))


class TestCoordName(unittest.TestCase):
    """Finding the fragment-coordinate parameter."""

    def test_prefers_location_zero(self):
        tokens = tokenize(FRAGMENT)
        self.assertEqual(find_coord_name(tokens, find_entry_function(tokens)), "coord")

    def test_falls_back_to_uv(self):
        tokens = tokenize("fn main(uv : vec2<f32>) -> vec4<f32> { return vec4<f32>(1.0); }")
        self.assertEqual(find_coord_name(tokens, find_entry_function(tokens)), "uv")

    def test_other_location_is_not_coordinate(self):
        tokens = tokenize("fn main(@location(1) p : vec2<f32>) { return; }")
        self.assertIsNone(find_coord_name(tokens, find_entry_function(tokens)))

    def test_unclosed_parameter_list(self):
        tokens = tokenize("fn main(@location(0) uv : vec2<f32>")
        self.assertIsNone(find_coord_name(tokens, find_entry_function(tokens)))

    def test_parameter_list_bounds(self):
        tokens = tokenize("fn main(a: f32, b: vec2<f32>) {}")
        open_index, close_index = find_parameter_list(tokens, find_entry_function(tokens))
        self.assertEqual(serialize(tokens[open_index : close_index + 1]), "(a: f32, b: vec2<f32>)")


class TestBodyAndReturn(unittest.TestCase):
    """Body start and terminal return statement."""

    def test_body_start_skips_return_type(self):
        tokens = tokenize(FRAGMENT)
        index = find_body_start(tokens, find_entry_function(tokens))
        self.assertEqual(tokens[index].text, "{")
        self.assertIn("let col", serialize(tokens[index:]))

    def test_last_return_is_in_main(self):
        tokens = tokenize(FRAGMENT)
        ret = find_last_return(tokens)
        start = ret.expression_start(tokens)
        self.assertEqual(serialize(tokens[start : ret.terminator]), "vec4<f32>(col, 1.0)")
        self.assertEqual(tokens[ret.terminator].text, ";")

    def test_no_return(self):
        self.assertIsNone(find_last_return(tokenize("let x = 1.0;")))

    def test_return_without_terminator(self):
        self.assertIsNone(find_last_return(tokenize("return x")))

    def test_expression_start_without_whitespace(self):
        tokens = tokenize("return(x);")
        ret = find_last_return(tokens)
        self.assertEqual(ret.expression_start(tokens), ret.keyword + 1)

    def test_matching_paren(self):
        tokens = tokenize("f(a, (b), c) + 1.0")
        close = find_matching_paren(tokens, 1)
        self.assertEqual(serialize(tokens[1 : close + 1]), "(a, (b), c)")
        self.assertIsNone(find_matching_paren(tokenize("f(a"), 1))


if __name__ == "__main__":
    unittest.main()
