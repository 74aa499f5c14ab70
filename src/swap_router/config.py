"""Network and session configuration (pydantic models, YAML loading).

A session file names the network (a preset name or a full mapping) and the
registry snapshot the engine should use:

    network: mainnet
    native_denoms: [uluna, uusd, ukrw]
    tokens:
      terra1...: {symbol: ANC, decimals: 6}
    pairs:
      terra1pool...: [uusd, terra1...]
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .core import (
    BRIDGE_ASSET,
    DEFAULT_SLIPPAGE_PERCENT,
    MAX_FEE_GAS,
    NATIVE_DENOM,
    is_finite,
)
from .registry import AssetRegistry, PairRegistry


class NetworkConfig(BaseModel):
    """Chain-specific endpoints, contracts and trade defaults."""

    model_config = ConfigDict(frozen=True)

    name: str
    fcd_url: str
    lcd_url: str
    native_denom: str = NATIVE_DENOM
    bridge_asset: str = BRIDGE_ASSET
    assert_limit_order_contract: Optional[str] = None
    route_contract: Optional[str] = None
    max_fee_gas: int = Field(MAX_FEE_GAS, gt=0)
    default_slippage_percent: str = DEFAULT_SLIPPAGE_PERCENT
    timeout: float = Field(10.0, gt=0)

    @field_validator("default_slippage_percent", mode="before")
    @classmethod
    def _slippage_numeric(cls, value: Any) -> str:
        text = str(value)
        if not is_finite(text):
            raise ValueError(f"default_slippage_percent must be numeric, got {value!r}")
        return text


NETWORKS: Dict[str, NetworkConfig] = {
    "mainnet": NetworkConfig(
        name="mainnet",
        fcd_url="https://fcd.terra.dev",
        lcd_url="https://lcd.terra.dev",
        assert_limit_order_contract="terra1vs9jr7pxuqwct3j29lez3pfetuu8xmq7tk3lzk",
        route_contract="terra19qx5xe6q9ll4w0890ux7lv2p4mf3csd4qvt3ex",
    ),
    "testnet": NetworkConfig(
        name="testnet",
        fcd_url="https://bombay-fcd.terra.dev",
        lcd_url="https://bombay-lcd.terra.dev",
        assert_limit_order_contract="terra1z3sf42ywpuhxdh78rr5vyqxpaxa0dx657x5trs",
        route_contract="terra14z80rwpd0alzj4xdtgqdmcqt9wd9xj5ffd7wz",
    ),
}


def get_network(name: str) -> NetworkConfig:
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(f"unknown network {name!r}; expected one of {sorted(NETWORKS)}") from None


class TokenInfo(BaseModel):
    symbol: str
    decimals: int = Field(6, ge=0)
    icon: Optional[str] = None


class SessionConfig(BaseModel):
    """Network plus the asset/pair registry snapshot for one session."""

    network: NetworkConfig
    native_denoms: List[str] = Field(default_factory=lambda: [NATIVE_DENOM])
    tokens: Dict[str, TokenInfo] = Field(default_factory=dict)
    pairs: Dict[str, List[str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _network_preset(cls, data: Any) -> Any:
        if isinstance(data, dict):
            network = data.get("network")
            if isinstance(network, str):
                data = {**data, "network": get_network(network)}
            elif isinstance(network, dict) and "preset" in network:
                overrides = {k: v for k, v in network.items() if k != "preset"}
                base = get_network(str(network["preset"]))
                data = {**data, "network": base.model_copy(update=overrides)}
        return data

    @field_validator("pairs")
    @classmethod
    def _pairs_have_two_assets(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for contract, assets in value.items():
            if len(assets) != 2:
                raise ValueError(f"pair {contract} must list exactly two assets")
        return value

    def asset_registry(self) -> AssetRegistry:
        tokens = {addr: info.model_dump() for addr, info in self.tokens.items()}
        return AssetRegistry.from_whitelist(self.native_denoms, tokens)

    def pair_registry(self) -> PairRegistry:
        return PairRegistry.from_mapping(self.pairs)


def load_yaml(path: Path | str) -> dict[str, Any]:
    cfg_path = Path(path)
    with cfg_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise TypeError(f"Configuration root must be a mapping, got {type(payload)!r}")
    return payload


def load_session_config(path: Path | str) -> SessionConfig:
    return SessionConfig.model_validate(load_yaml(path))


__all__ = [
    "NetworkConfig",
    "NETWORKS",
    "get_network",
    "TokenInfo",
    "SessionConfig",
    "load_yaml",
    "load_session_config",
]
