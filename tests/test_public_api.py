import tableview
from tableview.launcher import build_parser


def test_public_names_importable():
    for name in tableview.__all__:
        assert hasattr(tableview, name), name
    assert tableview.__version__ == "0.1.0"


def test_zero_height_table_binds_nothing():
    table = tableview.TableView(tableview.alphabet(), viewport_height=0)
    assert table.reload_data() == []


def test_launcher_arguments():
    args = build_parser().parse_args(["--rows", "1000", "--compact", "--verbose"])
    assert args.rows == 1000
    assert args.compact and not args.striped
    assert args.verbose
