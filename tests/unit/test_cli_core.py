from coastmiles.cli import parse_args


def test_parse_args_defaults():
    args = parse_args(["run"])
    assert args.command == "run"
    assert args.config == "./config/pipeline.yml"
    assert args.overlay_config is None
    assert args.run_id is None


def test_parse_args_accepts_overlay_config():
    args = parse_args(["serve", "--overlay-config", "config/live.yml"])
    assert args.overlay_config == "config/live.yml"
