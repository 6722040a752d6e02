# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Tests for EngineConfig."""

from __future__ import annotations

import dataclasses

import pytest

from shapecheck.config import DEFAULT_CONFIG, EngineConfig


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self) -> None:
        assert DEFAULT_CONFIG.widen_literals
        assert DEFAULT_CONFIG.index_signature_satisfies_required
        assert DEFAULT_CONFIG.allow_trailing_optional_tuple
        assert DEFAULT_CONFIG.enforce_tag_narrowing

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.widen_literals = False

    def test_dict_roundtrip(self) -> None:
        config = EngineConfig(widen_literals=False, enforce_tag_narrowing=False)
        assert EngineConfig.from_dict(config.to_dict()) == config

    def test_from_partial_dict(self) -> None:
        config = EngineConfig.from_dict({"allow_trailing_optional_tuple": False})
        assert not config.allow_trailing_optional_tuple
        assert config.widen_literals
        assert config.enforce_tag_narrowing

    def test_from_dict_keeps_false(self) -> None:
        config = EngineConfig.from_dict({"enforce_tag_narrowing": False, "widen_literals": False})
        assert not config.enforce_tag_narrowing
        assert not config.widen_literals

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_from_dict_rejects_non_bool(self, value) -> None:
        with pytest.raises(TypeError, match="widen_literals"):
            EngineConfig.from_dict({"widen_literals": value})
