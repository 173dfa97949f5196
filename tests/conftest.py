"""测试配置和共享 Fixtures。"""

import asyncio

import pytest

from collabswipe.errors import MatchStoreError, QuotaGateError
from collabswipe.models import Profile, QuotaState
from collabswipe.services.stores import MatchStore, ProfileSource, QuotaGate


# ============================================================================
# Mock Stores
# ============================================================================

class MockProfileSource(ProfileSource):
    """测试用 Mock Profile 来源。

    可以通过 viewer_failures 控制前 N 次获取当前用户失败。
    可以通过 profiles_should_fail 模拟候选池获取失败。
    可以通过 delay 模拟慢速后端。
    """

    def __init__(self, viewer=None, profiles=None):
        self.viewer = viewer
        self.profiles = list(profiles or [])
        self.viewer_failures = 0
        self.viewer_call_count = 0
        self.profiles_should_fail = False
        self.delay = 0.0

    async def get_current_profile(self):
        self.viewer_call_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.viewer_call_count <= self.viewer_failures:
            raise ConnectionError("Mock viewer fetch failure")
        return self.viewer

    async def get_all_profiles(self):
        if self.profiles_should_fail:
            raise ConnectionError("Mock profiles fetch failure")
        return list(self.profiles)


class MockMatchStore(MatchStore):
    """测试用 Mock Match 存储。

    should_fail_add 为 True 时 add_match 抛出 MatchStoreError。
    设置 gate (asyncio.Event) 后 add_match 会等待它被 set。
    """

    def __init__(self, matches=None):
        self.matches = list(matches or [])
        self.should_fail_get = False
        self.should_fail_add = False
        self.add_call_count = 0
        self.gate = None

    async def get_matches(self):
        if self.should_fail_get:
            raise MatchStoreError("Mock matches fetch failure")
        return list(self.matches)

    async def add_match(self, match):
        self.add_call_count += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.should_fail_add:
            raise MatchStoreError("Mock write failure")
        self.matches.append(match)


class MockQuotaGate(QuotaGate):
    """测试用 Mock 配额。

    可以通过 allowed / reason 控制返回值。
    """

    def __init__(self, allowed=True, reason=None):
        self.allowed = allowed
        self.reason = reason
        self.check_call_count = 0
        self.consume_call_count = 0
        self.should_fail_check = False
        self.should_fail_consume = False

    async def can_accept_now(self):
        self.check_call_count += 1
        if self.should_fail_check:
            raise QuotaGateError("Mock quota check failure")
        return QuotaState(allowed=self.allowed, reason=self.reason)

    async def consume_one(self):
        if self.should_fail_consume:
            raise QuotaGateError("Mock quota consume failure")
        self.consume_call_count += 1


# ============================================================================
# Profile Fixtures
# ============================================================================

def make_profile(profile_id, name=None, role="producer", genres=(), location="", **extra):
    """构建测试用 Profile。"""
    data = {
        "id": profile_id,
        "name": name or f"User {profile_id}",
        "role": role,
        "genres": list(genres),
        "location": location,
    }
    data.update(extra)
    return Profile.from_dict(data)


@pytest.fixture
def viewer() -> Profile:
    """创建示例 viewer（producer，喜欢 rock 和 jazz）。"""
    return make_profile(
        "viewer",
        name="Vic Viewer",
        role="producer",
        genres=["rock", "jazz"],
        location="Berlin",
    )


@pytest.fixture
def candidates() -> list[Profile]:
    """创建三个候选人。"""
    return [
        make_profile("c1", name="Cara", role="vocalist", genres=["jazz"], location="Berlin"),
        make_profile("c2", name="Dev", role="songwriter", genres=["pop"], location="Paris"),
        make_profile("c3", name="Eli", role="mixer", genres=["rock", "jazz"], location="Rome"),
    ]


@pytest.fixture
def profile_source(viewer, candidates) -> MockProfileSource:
    """候选池包含 viewer 本人和三个候选人。"""
    return MockProfileSource(viewer=viewer, profiles=[viewer, *candidates])


@pytest.fixture
def match_store() -> MockMatchStore:
    return MockMatchStore()


@pytest.fixture
def quota_gate() -> MockQuotaGate:
    return MockQuotaGate()


@pytest.fixture
def raw_profile() -> dict:
    """创建完整的原始 profile 记录。"""
    return {
        "id": "user_9",
        "name": "Nina Keys",
        "role": "instrumentalist",
        "location": "Austin, TX",
        "genres": ["Jazz", "Indie"],
        "bio": "Pianist and arranger.",
        "rating": 4.5,
        "verified": True,
        "highlights": [
            {"id": "h1", "type": "audio", "title": "Live at the Elephant Room"},
        ],
    }
