import pytest

from app.services.mechanic_attribution import attribute_mechanics

from conftest import make_estimate


def test_shared_estimate_splits_evenly_without_leakage(mechanics):
    e = make_estimate(
        "e1", "2024-06-01T10:00:00",
        labor=[
            {"description": "Engine rebuild", "hours": 5, "rate": 100},
            {"description": "Tuning", "hours": 1, "rate": 90},
        ],
        labor_discount=10,
        mechanic_ids=["m1", "m2", "m3"],
    )

    results = attribute_mechanics([e], mechanics)

    assert sum(r.total_labor_revenue for r in results) == pytest.approx((500 + 90) * 0.9)
    assert sum(r.total_hours for r in results) == pytest.approx(6)
    for r in results:
        assert r.total_labor_revenue == pytest.approx(531 / 3)
        assert r.total_hours == pytest.approx(2)
        assert r.completed_count == 1
        assert r.avg_hourly_rate == pytest.approx(531 / 6)


def test_idle_mechanics_are_zeroed_and_sorted_stably(mechanics):
    estimates = [
        make_estimate("e1", "2024-06-01T10:00:00",
                      labor=[{"description": "Service", "hours": 2, "rate": 50}],
                      mechanic_ids=["m3"]),
        make_estimate("e2", "2024-06-02T10:00:00",
                      labor=[{"description": "Service", "hours": 1, "rate": 50}],
                      mechanic_ids=["m3", "ghost"]),
        make_estimate("e3", "2024-06-03T10:00:00",
                      labor=[{"description": "Wash", "hours": 1, "rate": 20}]),
    ]

    results = attribute_mechanics(estimates, mechanics)

    assert [r.mechanic_id for r in results] == ["m3", "m1", "m2"]
    top = results[0]
    assert top.name == "Cristi"
    assert top.total_labor_revenue == pytest.approx(100 + 25)
    assert top.total_hours == pytest.approx(2.5)
    assert top.completed_count == 2
    assert top.avg_hourly_rate == pytest.approx(50)

    idle = results[1]
    assert idle.total_labor_revenue == 0
    assert idle.total_hours == 0
    assert idle.completed_count == 0
    assert idle.avg_hourly_rate == 0


def test_no_mechanics_no_results():
    e = make_estimate("e1", "2024-06-01T10:00:00",
                      labor=[{"description": "Service", "hours": 2, "rate": 50}],
                      mechanic_ids=["m1"])

    assert attribute_mechanics([e], []) == []
