"""凭据解析链测试。

测试覆盖：
- 优先级与短路
- 空值视为不存在
- 密钥库查询失败不中断解析
- 全部缺失时的诊断信息
"""

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from nano_banana_cli.config import Config
from nano_banana_cli.gemini.credentials import (
    CredentialResolver,
    CredentialSource,
    LookupOutcome,
    LookupStatus,
    default_sources,
    env_source,
    secret_store_source,
)
from nano_banana_cli.gemini.errors import NoCredentialFoundError


class CountingGetter:
    """记录调用的密钥库查询桩。"""

    def __init__(self, password: str | None = None, error: Exception | None = None) -> None:
        self.password = password
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    def __call__(self, service: str, username: str | None):
        self.calls.append((service, username))
        if self.error is not None:
            raise self.error
        if self.password is None:
            return None
        return SimpleNamespace(username=username or "user", password=self.password)


def make_resolver(env: dict[str, str], getter: CountingGetter) -> CredentialResolver:
    return CredentialResolver.from_config(Config(), environ=env, getter=getter)


# =============================================================================
# LookupOutcome
# =============================================================================


class TestLookupOutcome:
    """三态查询结果测试。"""

    def test_from_value_present(self):
        outcome = LookupOutcome.from_value("  key-123 ")
        assert outcome.status is LookupStatus.PRESENT
        assert outcome.value == "key-123"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_from_value_absent(self, value):
        assert LookupOutcome.from_value(value).status is LookupStatus.ABSENT

    def test_repr_hides_value(self):
        assert "secret-value" not in repr(LookupOutcome.present("secret-value"))


# =============================================================================
# 优先级
# =============================================================================


class TestPriority:
    """来源优先级测试。"""

    @pytest.mark.asyncio
    async def test_explicit_wins(self):
        """显式值优先，不查询环境变量和密钥库。"""
        getter = CountingGetter(password="from-keyring")
        resolver = make_resolver({"GOOGLE_AI_STUDIO_API_KEY": "from-env"}, getter)

        credential = await resolver.resolve("from-flag")

        assert credential.value == "from-flag"
        assert credential.source == "--api-key"
        assert getter.calls == []

    @pytest.mark.asyncio
    async def test_env_used_when_no_explicit(self):
        """无显式值时使用环境变量，不查询密钥库。"""
        getter = CountingGetter(password="from-keyring")
        resolver = make_resolver({"GOOGLE_AI_STUDIO_API_KEY": "from-env"}, getter)

        credential = await resolver.resolve(None)

        assert credential.value == "from-env"
        assert credential.source == "env:GOOGLE_AI_STUDIO_API_KEY"
        assert getter.calls == []

    @pytest.mark.asyncio
    async def test_keyring_used_last(self):
        """显式值与环境变量都缺失时查询密钥库。"""
        getter = CountingGetter(password="from-keyring")
        resolver = make_resolver({}, getter)

        credential = await resolver.resolve()

        assert credential.value == "from-keyring"
        assert credential.source == "keyring:google-ai-studio"
        assert getter.calls == [("google-ai-studio", None)]

    @pytest.mark.asyncio
    async def test_blank_explicit_falls_through(self):
        """空白的显式值视为不存在。"""
        getter = CountingGetter()
        resolver = make_resolver({"GOOGLE_AI_STUDIO_API_KEY": "from-env"}, getter)

        credential = await resolver.resolve("   ")

        assert credential.value == "from-env"

    @pytest.mark.asyncio
    async def test_later_sources_not_consulted(self):
        """命中后，后续来源的 lookup 不会被调用。"""
        consulted: list[str] = []

        def source(name: str, value: str | None) -> CredentialSource:
            async def lookup() -> LookupOutcome:
                consulted.append(name)
                return LookupOutcome.from_value(value)
            return CredentialSource(name, lookup)

        resolver = CredentialResolver([source("second", "two"), source("third", "three")])

        credential = await resolver.resolve(None)

        assert credential.value == "two"
        assert consulted == ["second"]

    @pytest.mark.asyncio
    async def test_no_caching(self):
        """每次调用都重新解析。"""
        env = {"GOOGLE_AI_STUDIO_API_KEY": "first"}
        resolver = make_resolver(env, CountingGetter())

        assert (await resolver.resolve()).value == "first"
        env["GOOGLE_AI_STUDIO_API_KEY"] = "second"
        assert (await resolver.resolve()).value == "second"


# =============================================================================
# 失败处理
# =============================================================================


class TestFailures:
    """查询失败与全部缺失测试。"""

    @pytest.mark.asyncio
    async def test_keyring_error_is_absorbed(self, caplog):
        """密钥库异常转换为 ERROR，最终报告 NoCredentialFound。"""
        getter = CountingGetter(error=RuntimeError("keychain locked"))
        resolver = make_resolver({}, getter)

        with caplog.at_level(logging.WARNING, logger="nano_banana_cli"):
            with pytest.raises(NoCredentialFoundError) as exc_info:
                await resolver.resolve()

        assert exc_info.value.sources == [
            "--api-key",
            "env:GOOGLE_AI_STUDIO_API_KEY",
            "keyring:google-ai-studio",
        ]
        assert "keychain locked" in caplog.text

    @pytest.mark.asyncio
    async def test_error_source_then_present(self):
        """前一个来源出错不影响后一个来源。"""

        async def broken() -> LookupOutcome:
            return LookupOutcome.error("unreachable")

        async def working() -> LookupOutcome:
            return LookupOutcome.present("ok")

        resolver = CredentialResolver([
            CredentialSource("broken", broken),
            CredentialSource("working", working),
        ])

        credential = await resolver.resolve()

        assert credential.value == "ok"
        assert credential.source == "working"

    @pytest.mark.asyncio
    async def test_all_absent_lists_sources_in_order(self):
        resolver = make_resolver({}, CountingGetter())

        with pytest.raises(NoCredentialFoundError) as exc_info:
            await resolver.resolve(None)

        assert exc_info.value.sources == [
            "--api-key",
            "env:GOOGLE_AI_STUDIO_API_KEY",
            "keyring:google-ai-studio",
        ]
        assert "GOOGLE_AI_STUDIO_API_KEY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_secret_without_password(self):
        """密钥库条目存在但密码为空，视为不存在。"""
        source = secret_store_source("svc", getter=CountingGetter(password=""))
        outcome = await source.lookup()
        assert outcome.status is LookupStatus.ABSENT


# =============================================================================
# 来源构建
# =============================================================================


class TestSources:
    """来源工厂测试。"""

    def test_default_sources_follow_config(self):
        config = Config(api_key_env="MY_KEY", secret_service="my-service", secret_username="me")
        names = [s.name for s in default_sources(config, environ={})]
        assert names == ["env:MY_KEY", "keyring:my-service"]

    @pytest.mark.asyncio
    async def test_secret_username_passed_through(self):
        getter = CountingGetter(password="pw")
        source = secret_store_source("svc", "alice", getter)
        outcome = await source.lookup()
        assert outcome.value == "pw"
        assert getter.calls == [("svc", "alice")]

    @pytest.mark.asyncio
    async def test_env_source_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("NANO_TEST_KEY", "env-value")
        outcome = await env_source("NANO_TEST_KEY").lookup()
        assert outcome.value == "env-value"

    @pytest.mark.asyncio
    async def test_credential_repr_masked(self):
        resolver = make_resolver({}, CountingGetter())
        credential = await resolver.resolve("AIzaSyVerySecretToken")
        assert "VerySecret" not in repr(credential)
        assert "VerySecret" not in str(credential)
