"""CompatibilityService 单元测试。"""

import pytest

from collabswipe.models import Profile, Role
from collabswipe.services.compatibility_service import explain, score
from conftest import make_profile


class TestScore:
    """测试 score() 计算。"""

    def test_genre_overlap_same_role_different_location(self):
        """测试 {rock,jazz} vs {jazz,pop}，相同 role，不同地点 = 85。"""
        viewer = make_profile("v", role="mixer", genres=["rock", "jazz"], location="Berlin")
        candidate = make_profile("c", role="mixer", genres=["jazz", "pop"], location="Paris")

        assert score(viewer, candidate) == 85

    def test_complementary_roles(self):
        """测试互补 role 加 30 分。"""
        viewer = make_profile("v", role="producer")
        candidate = make_profile("c", role="vocalist")

        assert score(viewer, candidate) == 80

    def test_complementary_roles_are_symmetric(self):
        producer = make_profile("p", role="producer")
        vocalist = make_profile("v", role="vocalist")

        assert score(producer, vocalist) == score(vocalist, producer)

    def test_unrelated_roles_add_nothing(self):
        viewer = make_profile("v", role="mixer")
        candidate = make_profile("c", role="ar")

        assert score(viewer, candidate) == 50

    def test_location_is_case_sensitive(self):
        """测试地点精确匹配（区分大小写）。"""
        viewer = make_profile("v", role="mixer", location="Berlin")

        assert score(viewer, make_profile("a", role="ar", location="Berlin")) == 70
        assert score(viewer, make_profile("b", role="ar", location="berlin")) == 50

    def test_empty_locations_never_match(self):
        """测试双方地点都为空时不加地点分。"""
        viewer = make_profile("v", role="mixer", location="")
        candidate = make_profile("c", role="ar", location="")

        assert explain(viewer, candidate).location == 0
        assert score(viewer, candidate) == 50

    def test_half_scores_round_up(self):
        """测试 .5 向上取整（52.5 -> 53）。"""
        viewer = make_profile("v", role="mixer", genres=[f"g{i}" for i in range(16)])
        candidate = make_profile("c", role="ar", genres=["g0"])

        assert explain(viewer, candidate).genre == pytest.approx(2.5)
        assert score(viewer, candidate) == 53

    def test_empty_genres_score_zero_genre_term(self):
        viewer = make_profile("v", role="mixer", genres=[])
        candidate = make_profile("c", role="ar", genres=["pop"])

        assert explain(viewer, candidate).genre == 0

    def test_maximum_is_capped_at_100(self):
        """测试分数上限为 100。"""
        viewer = make_profile("v", role="producer", genres=["pop"], location="LA")
        candidate = make_profile("c", role="vocalist", genres=["pop"], location="LA")

        assert score(viewer, candidate) == 100

    def test_accepts_raw_records(self):
        """测试可直接接受原始 dict 记录。"""
        viewer = {"id": "v", "name": "V", "role": "producer"}
        candidate = {"id": "c", "name": "C", "role": "vocalist"}

        assert score(viewer, candidate) == 80


class TestScoreFallback:
    """测试格式错误输入返回中性分 50。"""

    @pytest.mark.parametrize("viewer, candidate", [
        (None, {"id": "c", "name": "C", "role": "producer"}),
        ({"id": "v", "name": "V", "role": "producer"}, None),
        ({"id": "v", "role": "producer"}, {"id": "c", "name": "C", "role": "producer"}),
        ({"id": "v", "name": "V", "role": "producer"}, {"id": "c", "name": "C", "genres": 3}),
        ("not a profile", ["nor", "this"]),
    ])
    def test_malformed_input_scores_50(self, viewer, candidate):
        assert score(viewer, candidate) == 50
        assert explain(viewer, candidate).fallback is True

    def test_malformed_profile_objects_score_50(self):
        """测试直接构造的错误 Profile 对象也返回 50，而不是抛出异常。"""
        good = make_profile("c", role="producer", genres=["rock"])
        list_genres = Profile(id="v", name="V", role=Role.PRODUCER, genres=["rock"])
        no_role = Profile(id="v", name="V", role=None)
        empty_name = Profile(id="v", name="", role=Role.MIXER)

        for bad in (list_genres, no_role, empty_name):
            assert score(bad, good) == 50
            assert score(good, bad) == 50
            assert explain(bad, good).fallback is True

    def test_scores_always_within_bounds(self, viewer, candidates):
        """测试分数始终在 [0, 100]。"""
        for candidate in candidates:
            assert 0 <= score(viewer, candidate) <= 100


class TestExplain:
    """测试 explain() 分项结果。"""

    def test_breakdown_terms(self):
        viewer = make_profile("v", role="producer", genres=["rock", "jazz"], location="Berlin")
        candidate = make_profile("c", role="vocalist", genres=["jazz"], location="Berlin")

        breakdown = explain(viewer, candidate)

        assert breakdown.genre == 20
        assert breakdown.role == 30
        assert breakdown.location == 20
        assert breakdown.shared_genres == ["jazz"]
        assert breakdown.total == 100
        assert breakdown.to_dict()["fallback"] is False
