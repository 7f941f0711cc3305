import unittest

from pycptok.core.context import IoContext, split_lines
from pycptok.core.errors import ParseError, PreconditionViolation
from pycptok.core.parsers import Char, Unsigned
from pycptok.core.reader import TokenReader
from pycptok.core.streams import MemorySink, MemorySource
from pycptok.core.writer import Writer


def make_context(text, sink=None, chunk_size=64):
    return IoContext(
        TokenReader(MemorySource(text), chunk_size=chunk_size),
        Writer(sink if sink is not None else MemorySink()),
    )


class TestTypedReads(unittest.TestCase):

    def test_read_defaults_to_text(self):
        io = make_context("abc 12")
        self.assertEqual(io.read(), "abc")
        self.assertEqual(io.read(Unsigned), 12)

    def test_vector_then_token(self):
        io = make_context("3\n0, 1, 2 9")
        n = io.read(Unsigned)
        self.assertEqual(io.read_vector(int, n), [0, 1, 2])
        self.assertEqual(io.read(int), 9)

    def test_vector_of_zero_reads_nothing(self):
        io = make_context("5")
        self.assertEqual(io.read_vector(int, 0), [])
        self.assertEqual(io.read(int), 5)

    def test_negative_vector_length(self):
        with self.assertRaises(PreconditionViolation):
            make_context("1").read_vector(int, -1)

    def test_read_index(self):
        io = make_context("3 1")
        self.assertEqual(io.read_index(), 2)
        self.assertEqual(io.read_index(), 0)

    def test_read_index_rejects_zero(self):
        with self.assertRaises(PreconditionViolation):
            make_context("0").read_index()

    def test_read_index_as_offset(self):
        io = make_context("3\n0, 1, 2")
        idx = io.read_index()
        self.assertEqual(io.read_vector(Unsigned, 3)[idx], 2)

    def test_read_tuple(self):
        io = make_context("1, hello -5.1")
        self.assertEqual(io.read_tuple(Unsigned, str, float), (1, "hello", -5.1))

    def test_read_tuple_of_six(self):
        io = make_context("a 1 2.5 x true -3")
        self.assertEqual(
            io.read_tuple(str, int, float, Char, bool, int),
            ("a", 1, 2.5, "x", True, -3),
        )

    def test_read_tuple_arity_is_bounded(self):
        for types in ((int,), (int,) * 7, ()):
            with self.subTest(arity=len(types)):
                with self.assertRaises(PreconditionViolation):
                    make_context("1 2 3 4 5 6 7").read_tuple(*types)

    def test_read_chars(self):
        io = make_context("abc, def")
        self.assertEqual(io.read_chars(), ["a", "b", "c"])
        self.assertEqual(io.read_chars(), ["d", "e", "f"])


class TestDrainingReads(unittest.TestCase):

    def test_extract_integers(self):
        io = make_context("a: 12, b: -1 and d = 2")
        self.assertEqual(io.extract_integers(int), [12, -1, 2])
        self.assertEqual(io.read_all(), "")

    def test_extract_integers_ignores_decimal_notation(self):
        io = make_context("x-5y--3 4.5 1e9")
        self.assertEqual(io.extract_integers(), [-5, -3, 4, 5, 1, 9])

    def test_extract_integers_parses_as_requested_type(self):
        with self.assertRaises(ParseError):
            make_context("4 -2").extract_integers(Unsigned)

    def test_lines(self):
        io = make_context("1, a\r\n2, b\n")
        self.assertEqual(io.lines(), ["1, a", "2, b"])

    def test_split_lines_edge_cases(self):
        self.assertEqual(split_lines(""), [])
        self.assertEqual(split_lines("\n"), [""])
        self.assertEqual(split_lines("a\n\nb"), ["a", "", "b"])

    def test_line_contexts_are_independent(self):
        sinks = []

        def sink_factory():
            sink = MemorySink()
            sinks.append(sink)
            return sink

        parent = make_context("1, a\n2, b,\n  3 c")
        children = parent.line_contexts(sink_factory)
        self.assertEqual(parent.read_all(), "")

        seen = []
        for child in children:
            seen.append(child.read_tuple(Unsigned, Char))
            child.write(seen[-1][0] * 10)
            self.assertTrue(child.at_end())
            self.assertEqual(child.read(), "")

        self.assertEqual(seen, [(1, "a"), (2, "b"), (3, "c")])
        self.assertEqual([s.text() for s in sinks], ["10", "20", "30"])
        self.assertEqual(list(children), [])

    def test_line_contexts_flush_when_iteration_moves_on(self):
        sinks = []
        children = make_context("x\ny").line_contexts(lambda: sinks.append(MemorySink()) or sinks[-1])
        first = next(children)
        first.write("pending")
        self.assertEqual(sinks[0].text(), "")
        next(children)
        self.assertEqual(sinks[0].text(), "pending")
        children.close()

    def test_collected_line_contexts_stay_readable(self):
        children = list(make_context("1 a\n2 b\n3 c").line_contexts(MemorySink))
        self.assertEqual(len(children), 3)
        self.assertEqual(
            [child.read_tuple(Unsigned, Char) for child in children],
            [(1, "a"), (2, "b"), (3, "c")],
        )
        self.assertTrue(all(child.at_end() for child in children))

    def test_earlier_line_context_readable_after_advancing(self):
        children = make_context("4 5\n6").line_contexts(MemorySink)
        first = next(children)
        second = next(children)
        self.assertEqual(first.read_vector(int, 2), [4, 5])
        self.assertEqual(second.read(int), 6)


class TestWritingAndLifecycle(unittest.TestCase):

    def test_writes_reach_sink_on_close(self):
        sink = MemorySink()
        with make_context("", sink) as io:
            io.write("Test")
            io.newline()
            io.newline()
            io.write(5)
            io.write_debug([1, 2])
            self.assertEqual(sink.getvalue(), b"")
        self.assertEqual(sink.text(), "Test\n\n5[1, 2]")

    def test_write_line_flushes(self):
        sink = MemorySink()
        io = make_context("", sink)
        io.write_line("done")
        io.write_debug_line((1, "a"))
        self.assertEqual(sink.text(), "done\n(1, 'a')\n")


if __name__ == '__main__':
    unittest.main()
