"""
Trebuchet Launch Simulator: Symbolic Physics Derivation
=======================================================
Derives with SymPy the formulas the numerical model uses, so they can be
checked against beam.py, trebuchet_model.py and launch.py:

    1. Mass, first moment and polar moment about the pivot of each beam
       primitive, by integrating over its planar region
    2. Equation of motion of the rigid arm (Lagrangian, one DoF)
    3. Release velocity of the projectile end and the flight-time root

Generalized coordinate:
    theta (θ) - Arm angle from horizontal, counterweight side
"""

import sympy as sp
from sympy import sin, cos, Rational, diff, integrate
from sympy.physics.mechanics import dynamicsymbols
from sympy.utilities.lambdify import lambdify


# Beam dimension symbols, in the order section_functions() expects them
DIMENSION_NAMES = ('b1', 'b2', 'b3', 'b4', 'h1', 'h2', 'h3', 'h4', 'w', 'rho_t')


def _dimension_symbols():
    return {name: sp.Symbol(name, positive=True) for name in DIMENSION_NAMES}


def section_regions():
    """
    Planar region of one instance of each beam primitive.

    Returns
    -------
    dict : name -> (x_lo, x_hi, y_lo(x), y_hi(x), count)
    """
    s = _dimension_symbols()
    b1, b2, b3, b4 = s['b1'], s['b2'], s['b3'], s['b4']
    h1, h2, h3, h4 = s['h1'], s['h2'], s['h3'], s['h4']
    w = s['w']
    x = sp.Symbol('x', real=True)

    return {
        # Right triangles on top of the core rectangles, vertical edge
        # toward the pivot; the mirrored copy below has the same integrals
        'long_taper': (b2, b2 + b1, h2/2, h2/2 + h1*(1 - (x - b2)/b1), 2),
        'short_taper': (-b3 - b4, -b3, h4/2, h4/2 + h3*(1 - (-b3 - x)/b4), 2),
        'long_core': (b2, b2 + b1, -h2/2, h2/2, 1),
        'short_core': (-b3 - b4, -b3, -h4/2, h4/2, 1),
        'long_root': (0, b2, -w/2, w/2, 1),
        'short_root': (-b3, 0, -w/2, w/2, 1),
    }


def derive_section_integrals():
    """
    Integrate each primitive over its region.

    Returns
    -------
    dict : name -> {'mass', 'first_moment', 'inertia', 'count'}, expressions
           for a single instance in terms of DIMENSION_NAMES
    """
    print("\n1. Integrating beam sections...")

    s = _dimension_symbols()
    rho_t = s['rho_t']
    x = sp.Symbol('x', real=True)
    y = sp.Symbol('y', real=True)

    derived = {}
    for name, (x_lo, x_hi, y_lo, y_hi, count) in section_regions().items():
        mass = integrate(rho_t, (y, y_lo, y_hi), (x, x_lo, x_hi))
        first_moment = integrate(rho_t * x, (y, y_lo, y_hi), (x, x_lo, x_hi))
        inertia = integrate(rho_t * (x**2 + y**2), (y, y_lo, y_hi), (x, x_lo, x_hi))

        derived[name] = {
            'mass': sp.factor(mass),
            'first_moment': sp.expand(first_moment),
            'inertia': sp.expand(inertia),
            'count': count,
        }
        print(f"   {name}: m = {derived[name]['mass']}")

    return derived


def section_functions(derived=None):
    """
    Numerical versions of the section integrals.

    Returns
    -------
    dict : name -> f(b1, b2, b3, b4, h1, h2, h3, h4, w, rho_t)
           returning (mass, first_moment, inertia) of one instance
    """
    if derived is None:
        derived = derive_section_integrals()

    s = _dimension_symbols()
    args = [s[name] for name in DIMENSION_NAMES]

    functions = {}
    for name, exprs in derived.items():
        functions[name] = lambdify(
            args, (exprs['mass'], exprs['first_moment'], exprs['inertia']), 'numpy')
    return functions


def derive_equation_of_motion():
    """
    Lagrangian of the rigid arm about a fixed pivot.

    T = 1/2 I θ'^2,  V = m g sin(θ)

    with I the total inertia and m the net torque coefficient.

    Returns
    -------
    dict : 'theta_ddot' expression in (th, I, m, g), plus the symbols
    """
    print("\n2. Deriving equation of motion...")

    t = sp.Symbol('t')
    theta = dynamicsymbols('theta')
    d_theta = diff(theta, t)
    dd_theta = diff(theta, t, 2)

    I = sp.Symbol('I', positive=True)
    m = sp.Symbol('m', real=True)
    g = sp.Symbol('g', positive=True)

    T = Rational(1, 2) * I * d_theta**2
    V = m * g * sin(theta)
    L = T - V

    eom = diff(diff(L, d_theta), t) - diff(L, theta)
    theta_ddot = sp.solve(eom, dd_theta)[0]

    th = sp.Symbol('th', real=True)
    theta_ddot = theta_ddot.subs(theta, th)

    print(f"   θ'' = {theta_ddot}")

    return {
        'theta_ddot': theta_ddot,
        'energy': (T + V).subs(d_theta, sp.Symbol('thd', real=True)).subs(theta, th),
        'symbols': {'th': th, 'I': I, 'm': m, 'g': g},
    }


def derive_release_kinematics():
    """
    Velocity of the projectile end and the positive flight-time root.

    Returns
    -------
    dict : 'v_proj' (vx, vy) in (th, thd, L2), 'flight_time' in (vy0, H2, g)
    """
    print("\n3. Deriving release kinematics...")

    t = sp.Symbol('t')
    theta = dynamicsymbols('theta')
    L2 = sp.Symbol('L2', positive=True)
    h0 = sp.Symbol('h0', positive=True)

    # Projectile end, pivot above the origin
    p_proj = sp.Matrix([-L2 * cos(theta), h0 - L2 * sin(theta)])
    v_proj = diff(p_proj, t)

    th = sp.Symbol('th', real=True)
    thd = sp.Symbol('thd', real=True)
    v_proj = v_proj.subs(diff(theta, t), thd).subs(theta, th)

    # Landing: H2 + vy0*tau - g*tau^2/2 = 0
    tau = sp.Symbol('tau')
    vy0 = sp.Symbol('vy0', real=True)
    H2 = sp.Symbol('H2', positive=True)
    g = sp.Symbol('g', positive=True)
    roots = sp.solve(H2 + vy0 * tau - g * tau**2 / 2, tau)

    # Keep the root that is positive for any release height
    sample = {vy0: 0, H2: 1, g: 1}
    flight_time = [r for r in roots if r.subs(sample) > 0][0]

    print(f"   v_proj = {list(v_proj)}")
    print(f"   t_flight = {flight_time}")

    return {
        'v_proj': (v_proj[0], v_proj[1]),
        'flight_time': flight_time,
        'symbols': {'th': th, 'thd': thd, 'L2': L2, 'vy0': vy0, 'H2': H2, 'g': g},
    }


def main():
    """Derive everything and compare with the numerical model."""
    import numpy as np
    from config import TrebuchetConfig
    from beam import beam_dimensions, decompose_beam

    print("=" * 60)
    print("Trebuchet: Symbolic Derivation")
    print("=" * 60)

    derived = derive_section_integrals()
    eom = derive_equation_of_motion()
    kinematics = derive_release_kinematics()

    print("\n4. Comparing with beam.py for the default configuration...")
    geometry = TrebuchetConfig().get_geometry()
    dims = beam_dimensions(geometry)
    args = [dims[name] for name in DIMENSION_NAMES[:-2]] + [geometry.w, geometry.rho_t]

    functions = section_functions(derived)
    for section in decompose_beam(geometry):
        mass, first_moment, inertia = functions[section.name](*args)
        ok = np.allclose(
            [mass, first_moment, inertia],
            [section.mass, section.mass * section.centroid, section.inertia_pivot])
        print(f"   {section.name:12s} {'OK' if ok else 'MISMATCH'}")

    print("\n" + "=" * 60)
    print("DONE")
    print("=" * 60)

    return derived, eom, kinematics


if __name__ == "__main__":
    main()
