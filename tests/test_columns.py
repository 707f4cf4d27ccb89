from swarmlink.columns import capture_output, format_side_by_side, print_side_by_side


def test_capture_output_returns_printed_text():
    def speak():
        print("alpha")
        print("beta", end="")

    assert capture_output(speak) == "alpha\nbeta"


def test_capture_output_of_silent_function():
    assert capture_output(lambda: None) == ""


def test_two_columns_worked_example():
    assert format_side_by_side(["a\nbb\n", "x\n"]) == "a     x\nbb    \n"


def test_row_count_is_tallest_block():
    text = format_side_by_side(["one\ntwo\nthree\n", "1\n", "a\nb\n"])
    assert len(text.splitlines()) == 3


def test_first_column_is_padded_to_widest_line_plus_gap():
    left = "short\nmuch longer line\n"
    text = format_side_by_side([left, "R\nR\n"])
    for line in text.splitlines():
        assert line.index("R") == len("much longer line") + 4


def test_last_column_is_not_padded():
    text = format_side_by_side(["a\n", "tail\n"])
    assert text.splitlines()[0].endswith("tail")


def test_single_block_is_unchanged():
    assert format_side_by_side(["x\ny\n"]) == "x\ny\n"


def test_no_outputs_gives_nothing():
    assert format_side_by_side([]) == ""


def test_empty_lines_are_kept():
    text = format_side_by_side(["a\n\nb\n"])
    assert text == "a\n\nb\n"


def test_print_side_by_side_matches_format(capsys):
    outputs = ["left\nside\n", "right\n"]
    print_side_by_side(outputs)
    assert capsys.readouterr().out == format_side_by_side(outputs)


def test_capture_of_print_side_by_side():
    outputs = ["p\n", "q\n"]
    captured = capture_output(lambda: print_side_by_side(outputs))
    assert captured == format_side_by_side(outputs)