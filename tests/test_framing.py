from benq_projector.protocol import FrameAssembler, MAX_BUFFER_LENGTH

from .conftest import WriteRecorder


def make_assembler():
    corrections = WriteRecorder()
    return FrameAssembler(corrections), corrections


def test_lone_cr_completes_frame():
    assembler, corrections = make_assembler()
    assert assembler.feed(b">*vol=?#\r\r\n*vol=5#\r\n") == []
    frames = assembler.feed(b"\r")
    assert frames == [">*vol=?#\r\r\n*vol=5#\r\n\r"]
    assert assembler.buffer == ""
    assert corrections.data == []


def test_lone_cr_on_empty_buffer_yields_lone_cr_frame():
    assembler, _ = make_assembler()
    assert assembler.feed(b"\r") == ["\r"]
    assert assembler.buffer == ""


def test_cr_inside_chunk_does_not_complete_frame():
    assembler, _ = make_assembler()
    assert assembler.feed(b"*pow=on#\r") == []
    assert assembler.buffer == "*pow=on#\r"


def test_overflow_discards_and_sends_cr():
    assembler, corrections = make_assembler()
    assembler.feed(b"x" * 30)
    assembler.feed(b"y" * 30)
    assert assembler.buffer == ""
    assert corrections.data == [b"\r"]


def test_buffer_never_exceeds_limit():
    assembler, _ = make_assembler()
    for _ in range(20):
        assembler.feed(b"0123456789abc")
        assert len(assembler.buffer) <= MAX_BUFFER_LENGTH


def test_idle_prompt_discarded():
    assembler, corrections = make_assembler()
    assert assembler.feed(b"\r\n>\x00\r") == []
    assert assembler.buffer == ""
    assert corrections.data == [b"\r"]


def test_repeated_idle_prompt_discarded():
    assembler, corrections = make_assembler()
    assembler.feed(b"\r\n>\x00\r\r\n>\x00\r\r\n>\x00")
    assert assembler.buffer == ""
    assert corrections.data == [b"\r"]


def test_reset():
    assembler, _ = make_assembler()
    assembler.feed(b"*sour")
    assembler.reset()
    assert assembler.buffer == ""
