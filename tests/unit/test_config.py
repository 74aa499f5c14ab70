import pytest
from pydantic import ValidationError as PydanticValidationError

from swap_router.config import (
    NETWORKS,
    NetworkConfig,
    SessionConfig,
    get_network,
    load_session_config,
    load_yaml,
)

from tests.conftest import ANC, UST_ANC_POOL


SESSION_YAML = f"""
network: testnet
native_denoms: [uluna, uusd, ukrw]
tokens:
  {ANC}: {{symbol: ANC, decimals: 6}}
pairs:
  {UST_ANC_POOL}: [uusd, {ANC}]
"""


def test_presets_carry_guard_and_route_contracts():
    for name, cfg in NETWORKS.items():
        assert cfg.name == name
        assert cfg.assert_limit_order_contract.startswith("terra1")
        assert cfg.route_contract.startswith("terra1")
        assert cfg.max_fee_gas == 800_000


def test_get_network_unknown_name():
    with pytest.raises(ValueError):
        get_network("columbus-0")


def test_network_rejects_non_numeric_slippage():
    with pytest.raises(PydanticValidationError):
        NetworkConfig(name="x", fcd_url="http://f", lcd_url="http://l", default_slippage_percent="abc")


def test_network_rejects_non_positive_gas():
    with pytest.raises(PydanticValidationError):
        NetworkConfig(name="x", fcd_url="http://f", lcd_url="http://l", max_fee_gas=0)


def test_load_session_config_from_yaml(tmp_path):
    path = tmp_path / "session.yaml"
    path.write_text(SESSION_YAML, encoding="utf-8")
    session = load_session_config(path)
    print("[config] network:", session.network.name)
    assert session.network == get_network("testnet")

    assets = session.asset_registry()
    assert [a.symbol for a in assets] == ["Luna", "UST", "KRT", "ANC"]
    assert assets.is_oracle_listed("ukrw")
    assert not assets.is_oracle_listed(ANC)
    assert session.pair_registry().find(ANC, "uusd").contract == UST_ANC_POOL


def test_network_preset_with_overrides():
    session = SessionConfig.model_validate({
        "network": {"preset": "mainnet", "assert_limit_order_contract": None, "timeout": 3},
    })
    assert session.network.fcd_url == "https://fcd.terra.dev"
    assert session.network.assert_limit_order_contract is None
    assert session.network.timeout == 3


def test_pairs_need_two_assets():
    with pytest.raises(PydanticValidationError):
        SessionConfig.model_validate({"network": "mainnet", "pairs": {"terra1pool": ["uusd"]}})


def test_load_yaml_rejects_non_mapping_root(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_yaml(path)
