"""
Tests for JSON configuration loading
"""
import json

import pytest

from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ConfigurationError
from hermod.configs.stages import Stage

from conftest import ACCOUNT, REGION


@pytest.fixture
def mgr(scratch_stack):
    return ConfigManager(scratch_stack, Stage.DEV)


def test_stage_vars(scratch_stack):
    assert ConfigManager.stage_vars(scratch_stack, Stage.PROD, extra={"Build": 7}) == {
        "AppName": "hermod",
        "Stage": "prod",
        "AccountId": ACCOUNT,
        "Region": REGION,
        "Partition": scratch_stack.partition,
        "Build": "7",
    }


def test_expand_placeholders_recurses(mgr):
    expanded = mgr.expand_placeholders(
        {"name": "${AppName}-${Stage}-data-${AccountId}-${Region}", "list": ["${Stage}", 3], "n": True}
    )
    assert expanded == {
        "name": f"hermod-dev-data-{ACCOUNT}-{REGION}",
        "list": ["dev", 3],
        "n": True,
    }


def test_unknown_placeholders_are_left_alone(mgr):
    assert mgr.expand_placeholders("${Nope}/$context.requestTime") == "${Nope}/$context.requestTime"


def test_get_config_path(mgr):
    assert mgr.get_config_path("rest_apis") == ConfigManager.CONFIG_ROOT / "apis" / "rest"
    assert mgr.get_config_path("tables", "routes.json").name == "routes.json"
    with pytest.raises(ConfigurationError, match="config_type"):
        mgr.get_config_path("queues")


def test_load_json_missing_file(mgr, tmp_path):
    with pytest.raises(FileNotFoundError):
        mgr.load_json(tmp_path / "missing.json")


def test_load_json_without_expansion(mgr, tmp_path):
    path = tmp_path / "conf.json"
    path.write_text(json.dumps({"name": "${Stage}"}), encoding="utf-8")

    assert mgr.load_json(path, expand_vars=False) == {"name": "${Stage}"}
    assert mgr.load_json(path) == {"name": "dev"}


def test_merge_with_defaults_accumulates_grants():
    defaults = {"memory": 256, "dynamodb_access": [{"table": "a"}], "s3_access": [{"bucket": "x"}]}
    conf = {"memory": 512, "dynamodb_access": [{"table": "b"}]}

    merged = ConfigManager.merge_with_defaults(defaults, conf)

    assert merged["memory"] == 512
    assert merged["dynamodb_access"] == [{"table": "a"}, {"table": "b"}]
    assert merged["s3_access"] == [{"bucket": "x"}]
    assert defaults["dynamodb_access"] == [{"table": "a"}]


def test_load_tables(mgr):
    configs = mgr.load_configs_with_defaults("tables")
    names = [conf["name"] for _, conf in configs]

    assert names == ["predictions", "routes", "transit-data", "user-preferences", "weather-data"]
    routes = dict((conf["name"], conf) for _, conf in configs)["routes"]
    assert routes["table_name"] == "hermod-dev-routes"
    assert routes["env_var"] == "ROUTES_TABLE"


def test_load_lambdas_merges_defaults(mgr):
    configs = {conf["name"]: conf for _, conf in mgr.load_configs_with_defaults("lambdas", "lambda.defaults.json")}

    assert len(configs) == 9
    assert "lambda.defaults" not in configs

    get_prefs = configs["get-user-preferences"]
    assert get_prefs["function_name"] == "hermod-dev-get-user-preferences"
    assert get_prefs["memory"] == 256
    assert get_prefs["dynamodb_access"][-1] == {"table": "user-preferences", "access": "read"}
    assert len(get_prefs["dynamodb_access"]) == 5

    compute = configs["compute-route"]
    assert compute["memory"] == 512
    assert compute["timeout"] == 60
    assert {"bucket": "ml-models", "access": "read"} in compute["s3_access"]
    assert {"bucket": "data", "access": "readwrite"} in compute["s3_access"]


def test_find_api_dirs_and_routes(mgr):
    api_dirs = mgr.find_api_dirs()

    assert [d.name for d in api_dirs] == ["hermod"]
    assert len(mgr.find_route_files(api_dirs[0])) == 12


def test_list_config_files_excludes(mgr):
    files = mgr.list_config_files("lambdas", exclude={"lambda.defaults.json"})
    assert all(f.name != "lambda.defaults.json" for f in files)
    assert files == sorted(files)
