"""
Unit tests for top-level decode and release
"""

import io
import unittest

from apidump import (
    ApiDescriptor, Define, DefineType, GrammarMismatch,
    InvalidCount, IndexMismatch, FieldTooLong, UnknownDefineType,
    UnexpectedEndOfStream, TrackingAllocator, decode, decode_bytes, release,
)

from test.utils.test_utils import DumpTestCase, EMPTY_TAIL, render_dump, sample_api

SCENARIO = (
    b"\nDefines found: 1\n\n"
    b"Define 1: FOO\n"
    b"  Name: FOO\n"
    b"  Type: INT\n"
    b"  Value: 42\n"
    b"  Description: answer\n"
    + EMPTY_TAIL
)


class FailingStream:
    """Stream that raises OSError after a number of bytes"""

    def __init__(self, data: bytes, fail_at: int):
        self._inner = io.BytesIO(data)
        self._fail_at = fail_at

    def read(self, n: int = -1) -> bytes:
        if self._inner.tell() >= self._fail_at:
            raise OSError("connection reset")
        return self._inner.read(n)


class TestDecodeScenario(DumpTestCase):
    """Test the single-define dump"""

    def test_single_define(self):
        api = decode_bytes(SCENARIO)
        self.assertEqual(api.defines, [Define("FOO", DefineType.INT, "42", "answer")])
        for name in ('structs', 'aliases', 'enums', 'callbacks', 'functions'):
            self.assertEqual(getattr(api, name), [], name)

    def test_all_sections_empty(self):
        api = decode_bytes(b"\nDefines found: 0\n\n" + EMPTY_TAIL)
        self.assertEqual(api, ApiDescriptor())

    def test_reads_from_file_like_stream(self):
        api = decode(io.BufferedReader(io.BytesIO(SCENARIO)))
        self.assertEqual(api.defines[0].name, "FOO")


class TestDecodeShape(DumpTestCase):
    """Test counts and order at every nesting level"""

    def setUp(self):
        self.expected = sample_api()
        self.data = render_dump(self.expected)

    def test_matches_rendered_descriptor(self):
        api, allocator = self.decode_tracked(self.data)
        self.assertEqual(api, self.expected)
        release(api, allocator)
        self.assertEqual(allocator.outstanding, 0)

    def test_counts_at_every_level(self):
        api = decode_bytes(self.data)
        self.assertEqual(api.counts(), self.expected.counts())
        self.assertEqual([len(s.fields) for s in api.structs], [2, 0])
        self.assertEqual([len(e.values) for e in api.enums], [3])
        self.assertEqual([len(c.params) for c in api.callbacks], [3])
        self.assertEqual([len(f.params) for f in api.functions], [3, 0])

    def test_order_follows_stamped_index(self):
        api = decode_bytes(self.data)
        self.assertEqual(
            [d.name for d in api.defines],
            ["RAYLIB_H", "RAYLIB_VERSION", "PI", "DEG2RAD", "LIGHTGRAY"],
        )
        self.assertEqual([p.name for p in api.functions[0].params], ["width", "height", "title"])

    def test_strings_are_independent_objects(self):
        api, allocator = self.decode_tracked(self.data)
        vector2 = api.structs[0]
        self.assertIsNot(vector2.fields[0].type, vector2.fields[1].type)


class TestStrictGrammar(DumpTestCase):
    """Any literal byte changed must fail with GrammarMismatch"""

    LITERALS = [
        b"\nDefines found: ",
        b"\nDefine ",
        b"  Name: ",
        b"  Type: ",
        b"  Value: ",
        b"  Description: ",
        b"\nStructs found: ",
        b"\nAliases found: ",
        b"\nEnums found: ",
        b"\nCallbacks found: ",
        b"\nFunctions found: ",
    ]

    def test_misspelled_header(self):
        data = SCENARIO.replace(b"Defines found: ", b"Defines founde: ")
        error = self.assertDecodeFails(data, GrammarMismatch)
        self.assertEqual(error.location.offset, 0)

    def test_every_literal_byte(self):
        for literal in self.LITERALS:
            start = SCENARIO.find(literal)
            self.assertGreaterEqual(start, 0, literal)
            for offset in range(start, start + len(literal)):
                data = SCENARIO[:offset] + b"#" + SCENARIO[offset + 1:]
                self.assertDecodeFails(data, GrammarMismatch, msg=f"{literal!r} byte {offset}")

    # (context, literal inside it) in the rendered sample dump
    NESTED_LITERALS = [
        (b"Define 1: ", b": "),
        (b"Struct 1: ", b": "),
        (b"  Fields found: ", b"  Fields found: "),
        (b"    Field 1: ", b"    Field "),
        (b"    Field 1: ", b": "),
        (b"float | x", b" | "),
        (b"  Values found: ", b"  Values found: "),
        (b"    Value 1: ", b"    Value "),
        (b"FLAG_VSYNC_HINT | 64", b" | "),
        (b"  Return type: ", b"  Return type: "),
        (b"  Params found: ", b"  Params found: "),
        (b"    Param 1: ", b"    Param "),
        (b"    Param 1: ", b": "),
        (b"int | logLevel", b" | "),
        (b"Function 2: ", b": "),
    ]

    def test_every_nested_literal_byte(self):
        data = render_dump(sample_api())
        for context, literal in self.NESTED_LITERALS:
            start = data.find(context)
            self.assertGreaterEqual(start, 0, context)
            start += context.index(literal)
            for offset in range(start, start + len(literal)):
                mutated = data[:offset] + b"#" + data[offset + 1:]
                self.assertDecodeFails(mutated, GrammarMismatch, msg=f"{context!r} byte {offset}")

    def test_damaged_title_separator(self):
        for stamp in (b"Define 1# ", b"Define 1:#"):
            with self.subTest(stamp=stamp):
                data = SCENARIO.replace(b"Define 1: ", stamp)
                error = self.assertDecodeFails(data, GrammarMismatch)
                self.assertEqual(error.location.line, 4)

    def test_sections_out_of_order(self):
        data = SCENARIO.replace(b"\nStructs found: 0\n\n\nAliases found: 0\n\n",
                                b"\nAliases found: 0\n\n\nStructs found: 0\n\n")
        self.assertDecodeFails(data, GrammarMismatch)

    def test_trailing_bytes(self):
        self.assertDecodeFails(SCENARIO + b"\n", GrammarMismatch)

    def test_invalid_count(self):
        data = SCENARIO.replace(b"Defines found: 1", b"Defines found: one")
        self.assertDecodeFails(data, InvalidCount)

    def test_hex_count(self):
        api = decode_bytes(SCENARIO.replace(b"Defines found: 1", b"Defines found: 0x1"))
        self.assertEqual(len(api.defines), 1)

    def test_index_mismatch(self):
        data = SCENARIO.replace(b"Define 1: ", b"Define 2: ")
        self.assertDecodeFails(data, IndexMismatch)

    def test_field_too_long(self):
        data = SCENARIO.replace(b"  Name: FOO", b"  Name: " + b"F" * 65)
        self.assertDecodeFails(data, FieldTooLong)


class TestDefineTypeTags(DumpTestCase):
    """Test case-insensitive define type tags"""

    def decode_tag(self, tag: bytes):
        return decode_bytes(SCENARIO.replace(b"Type: INT", b"Type: " + tag)).defines[0].type

    def test_upper_and_lower_case(self):
        self.assertIs(self.decode_tag(b"INT_MATH"), DefineType.INT_MATH)
        self.assertIs(self.decode_tag(b"int_math"), DefineType.INT_MATH)

    def test_every_tag(self):
        for define_type in DefineType:
            with self.subTest(tag=define_type.tag):
                self.assertIs(self.decode_tag(define_type.tag.encode()), define_type)

    def test_bogus_tag(self):
        data = SCENARIO.replace(b"Type: INT", b"Type: bogus_tag")
        self.assertDecodeFails(data, UnknownDefineType)


class TestFailureCleanup(DumpTestCase):
    """Test that nothing is leaked or released twice on failure"""

    def test_every_truncation(self):
        data = render_dump(sample_api())
        for k in range(len(data)):
            self.assertDecodeFails(data[:k], UnexpectedEndOfStream, msg=f"cut at {k}")
        api, allocator = self.decode_tracked(data)
        release(api, allocator)
        self.assertEqual(allocator.outstanding, 0)

    def test_failure_in_last_section_releases_earlier_ones(self):
        data = render_dump(sample_api()).replace(b"Param 3: const char * | title",
                                                 b"Param 3: const char * ; title")
        self.assertDecodeFails(data, GrammarMismatch)

    def test_stream_error_propagates(self):
        data = render_dump(sample_api())
        allocator = TrackingAllocator()
        with self.assertRaises(OSError):
            decode(FailingStream(data, len(data) // 2), allocator=allocator)
        self.assertEqual(allocator.outstanding, 0)


class TestRelease(DumpTestCase):

    def test_release_twice(self):
        api, allocator = self.decode_tracked(SCENARIO)
        release(api, allocator)
        with self.assertRaises(ValueError):
            release(api, allocator)

    def test_release_with_default_allocator(self):
        api = decode_bytes(SCENARIO)
        release(api)
        self.assertTrue(api.released)


if __name__ == '__main__':
    unittest.main()
