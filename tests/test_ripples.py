import numpy as np
import pytest

from starry_string.ripples import RippleField


def test_spawn_starts_fresh():
    field = RippleField(max_age=60)
    ripple = field.spawn(10, 20)

    assert (ripple.x, ripple.y) == (10, 20)
    assert ripple.age == 0
    assert ripple.max_age == 60
    assert ripple.intensity == 1.0
    assert ripple.life == 1.0
    assert len(field) == 1


def test_ripple_lives_exactly_max_age_frames():
    field = RippleField(max_age=3)
    ripple = field.spawn(0, 0)

    field.advance()
    field.advance()
    assert len(field) == 1
    assert ripple.age == 2

    field.advance()
    assert len(field) == 0


def test_advance_ages_every_ripple_once():
    field = RippleField(max_age=10)
    first = field.spawn(0, 0)
    field.advance()
    second = field.spawn(5, 5)
    third = field.spawn(6, 6)
    field.advance()

    assert [r.age for r in field] == [2, 1, 1]
    assert first.life == pytest.approx(0.8)
    assert second.life == third.life == pytest.approx(0.9)


def test_ids_are_unique():
    field = RippleField()
    ids = [field.spawn(i, i).id for i in range(50)]
    assert len(set(ids)) == 50


def test_ripples_is_a_snapshot():
    field = RippleField()
    field.spawn(1, 1)
    snapshot = field.ripples
    snapshot.clear()
    assert len(field) == 1


def test_render_passes_life_and_skips_spent_ripples():
    field = RippleField(max_age=4)
    young = field.spawn(0, 0)
    field.advance()
    old = field.spawn(1, 1)
    old.age = old.max_age  # spent but not yet collected

    calls = []
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    painted = field.render(image, lambda img, r, life: calls.append((img, r, life)))

    assert painted == 1
    assert len(calls) == 1
    img, ripple, life = calls[0]
    assert img is image
    assert ripple is young
    assert life == pytest.approx(0.75)


def test_clear():
    field = RippleField()
    field.spawn(0, 0)
    field.clear()
    assert len(field) == 0


@pytest.mark.parametrize("max_age", [0, -5])
def test_rejects_non_positive_lifetime(max_age):
    with pytest.raises(ValueError):
        RippleField(max_age=max_age)
