"""
Tests for the beam geometry decomposition.

Covers:
- Section layout and mirrored counts
- Mass and first moment against planform closed forms
- Parallel-axis round trip and non-negative centroidal inertia
- Rejection of invalid geometry
"""

import numpy as np
import pytest

from config import BeamGeometry, ConfigurationError
from beam import beam_dimensions, decompose_beam, beam_mass_properties, beam_outline
from conftest import planform_area, planform_first_moment


VALID_GEOMETRIES = [
    BeamGeometry(L1=2.0, L2=6.0, w=0.3, t=0.08, rho=500.0),
    BeamGeometry(L1=1.0, L2=1.0, w=0.1, t=0.1, rho=1000.0),
    BeamGeometry(L1=5.0, L2=2.0, w=0.5, t=0.2, rho=7800.0),
    BeamGeometry(L1=0.01, L2=20.0, w=2.0, t=0.001, rho=1.0),
    BeamGeometry(L1=3.0, L2=9.0, w=0.05, t=0.05, rho=650.0),
]


def test_dimensions(geometry):
    d = beam_dimensions(geometry)
    assert d['b1'] + d['b2'] == pytest.approx(geometry.L1)
    assert d['b3'] + d['b4'] == pytest.approx(geometry.L2)
    # Taper pairs plus core fill the full width at the breakpoints
    assert 2 * d['h1'] + d['h2'] == pytest.approx(geometry.w)
    assert 2 * d['h3'] + d['h4'] == pytest.approx(geometry.w)


def test_six_sections_with_mirrored_tapers(geometry):
    sections = decompose_beam(geometry)
    names = [s.name for s in sections]

    assert len(sections) == 6
    assert len(set(names)) == 6
    counts = {s.name: s.count for s in sections}
    assert counts['long_taper'] == 2
    assert counts['short_taper'] == 2
    assert all(counts[n] == 1 for n in ('long_core', 'short_core', 'long_root', 'short_root'))


def test_section_centroids_sides(geometry):
    sections = {s.name: s for s in decompose_beam(geometry)}
    d = beam_dimensions(geometry)

    assert sections['long_taper'].centroid == pytest.approx(d['b2'] + d['b1'] / 3)
    assert sections['short_taper'].centroid == pytest.approx(-(d['b3'] + d['b4'] / 3))
    for name in ('long_taper', 'long_core', 'long_root'):
        assert 0 < sections[name].centroid < geometry.L1
    for name in ('short_taper', 'short_core', 'short_root'):
        assert -geometry.L2 < sections[name].centroid < 0


@pytest.mark.parametrize("geom", VALID_GEOMETRIES)
def test_mass_matches_planform_area(geom):
    props = beam_mass_properties(geom)
    assert props.mass > 0
    assert props.mass == pytest.approx(geom.rho_t * planform_area(geom), rel=1e-9)


@pytest.mark.parametrize("geom", VALID_GEOMETRIES)
def test_centroid_matches_planform_moment(geom):
    props = beam_mass_properties(geom)
    expected = geom.rho_t * planform_first_moment(geom)
    assert props.mass * props.centroid_offset == pytest.approx(expected, rel=1e-9)


@pytest.mark.parametrize("geom", VALID_GEOMETRIES)
def test_centroidal_inertia_non_negative(geom):
    props = beam_mass_properties(geom)
    assert props.inertia_about_centroid >= 0


@pytest.mark.parametrize("geom", VALID_GEOMETRIES)
def test_parallel_axis_round_trip(geom):
    """Summed pivot inertia equals Ib + mb*Lb^2."""
    props = beam_mass_properties(geom)
    I_pivot = sum(s.total_inertia for s in decompose_beam(geom))

    assert props.inertia_about_pivot == pytest.approx(I_pivot, rel=1e-12)


def test_rectangle_inertia_closed_form():
    """Full-width root rectangle: M*(b^2/3 + w^2/12) about the pivot."""
    geom = BeamGeometry(L1=2.0, L2=6.0, w=0.3, t=0.08, rho=500.0)
    root = {s.name: s for s in decompose_beam(geom)}['long_root']
    b2 = 0.2 * geom.L1

    assert root.mass == pytest.approx(geom.rho_t * geom.w * b2)
    assert root.inertia_pivot == pytest.approx(root.mass * (b2**2 / 3 + geom.w**2 / 12))


def test_symmetric_arm_centroid_position():
    """Equal arms: the long side is denser (0.76 vs 0.64), so the centroid is on it."""
    props = beam_mass_properties(BeamGeometry(L1=4.0, L2=4.0, w=0.2, t=0.1, rho=500.0))
    assert props.centroid_offset > 0


def test_inertia_scales_with_density(geometry):
    light = beam_mass_properties(geometry)
    heavy = beam_mass_properties(BeamGeometry(
        L1=geometry.L1, L2=geometry.L2, w=geometry.w, t=geometry.t, rho=2 * geometry.rho))

    assert heavy.mass == pytest.approx(2 * light.mass)
    assert heavy.centroid_offset == pytest.approx(light.centroid_offset)
    assert heavy.inertia_about_centroid == pytest.approx(2 * light.inertia_about_centroid)


@pytest.mark.parametrize("field", ['L1', 'L2', 'w', 't', 'rho'])
@pytest.mark.parametrize("value", [0.0, -1.0, float('nan'), float('inf')])
def test_invalid_geometry_rejected(field, value):
    kwargs = dict(L1=2.0, L2=6.0, w=0.3, t=0.08, rho=500.0)
    kwargs[field] = value
    with pytest.raises(ConfigurationError):
        BeamGeometry(**kwargs)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        BeamGeometry(L1=-2.0, L2=6.0, w=0.3, t=0.08, rho=500.0)


def test_outline_spans_arm(geometry):
    outline = beam_outline(geometry)

    assert outline.shape == (8, 2)
    assert outline[:, 0].max() > geometry.L1
    assert outline[:, 0].min() < -geometry.L2
    assert np.abs(outline[:, 1]).max() == pytest.approx(0.5 * geometry.w)
