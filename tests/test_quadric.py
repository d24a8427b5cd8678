"""Unit tests for the general quadric surface.

Tests cover:
- Evaluation and analytic gradient
- Robust quadratic solver, including the linear and degenerate cases
- hit_quadric against spheres, planes and clipped surfaces
- Root selection when the nearer root leaves the clipping box
- Normal orientation and t range handling
"""

import taichi as ti


class TestEvaluateQuadric:
    """Tests for evaluate_quadric and quadric_gradient."""

    def test_evaluate_sphere(self):
        """Test f is zero on the sphere, negative inside and positive outside."""
        from src.quadrics.geometry.quadric import evaluate_quadric, make_quadric_surface, vec3

        values = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -4.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            values[0] = evaluate_quadric(surface, vec3(0.0, 2.0, 0.0))
            values[1] = evaluate_quadric(surface, vec3(0.0, 0.0, 0.0))
            values[2] = evaluate_quadric(surface, vec3(3.0, 0.0, 0.0))

        test_kernel()
        assert abs(values[0]) < 1e-6
        assert abs(values[1] + 4.0) < 1e-6
        assert abs(values[2] - 5.0) < 1e-6

    def test_evaluate_all_terms(self):
        """Test every coefficient contributes its monomial."""
        from src.quadrics.geometry.quadric import evaluate_quadric, make_quadric_surface, vec3

        value = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            value[None] = evaluate_quadric(surface, vec3(1.0, 2.0, 3.0))

        test_kernel()
        # 1 + 8 + 27 + 8 + 15 + 36 + 7 + 16 + 27 + 10
        assert abs(value[None] - 155.0) < 1e-4

    def test_gradient(self):
        """Test the analytic gradient of a general coefficient set."""
        from src.quadrics.geometry.quadric import make_quadric_surface, quadric_gradient, vec3

        grad = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            grad[None] = quadric_gradient(surface, vec3(1.0, 2.0, 3.0))

        test_kernel()
        g = grad[None]
        # 2Ax + Dy + Ez + G = 2 + 8 + 15 + 7
        assert abs(g[0] - 32.0) < 1e-4
        # 2By + Dx + Fz + H = 8 + 4 + 18 + 8
        assert abs(g[1] - 38.0) < 1e-4
        # 2Cz + Ex + Fy + I = 18 + 5 + 12 + 9
        assert abs(g[2] - 44.0) < 1e-4


class TestSolveQuadratic:
    """Tests for the robust quadratic solver."""

    def test_two_roots_sorted(self):
        """Test t^2 - 5t + 6 = 0 gives sorted roots 2 and 3."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        found = ti.field(dtype=ti.i32, shape=())
        roots = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            f, t0, t1 = _solve_quadratic_robust(1.0, -5.0, 6.0)
            found[None] = f
            roots[0] = t0
            roots[1] = t1

        test_kernel()
        assert found[None] == 1
        assert abs(roots[0] - 2.0) < 1e-5
        assert abs(roots[1] - 3.0) < 1e-5

    def test_negative_a_roots_sorted(self):
        """Test roots stay sorted when a is negative."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        roots = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            _, t0, t1 = _solve_quadratic_robust(-1.0, 5.0, -6.0)
            roots[0] = t0
            roots[1] = t1

        test_kernel()
        assert abs(roots[0] - 2.0) < 1e-5
        assert abs(roots[1] - 3.0) < 1e-5

    def test_no_real_roots(self):
        """Test a negative discriminant reports no solution."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        found = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            f, _, _ = _solve_quadratic_robust(1.0, 0.0, 1.0)
            found[None] = f

        test_kernel()
        assert found[None] == 0

    def test_double_root_at_vertex(self):
        """Test b == 0 and c == 0 gives the double root 0 without dividing by zero."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        found = ti.field(dtype=ti.i32, shape=())
        roots = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            f, t0, t1 = _solve_quadratic_robust(2.0, 0.0, 0.0)
            found[None] = f
            roots[0] = t0
            roots[1] = t1

        test_kernel()
        assert found[None] == 1
        assert abs(roots[0]) < 1e-6
        assert abs(roots[1]) < 1e-6

    def test_linear_case(self):
        """Test a negligible a falls back to the linear root -c/b."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        found = ti.field(dtype=ti.i32, shape=())
        roots = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            f, t0, t1 = _solve_quadratic_robust(1e-8, 2.0, -6.0)
            found[None] = f
            roots[0] = t0
            roots[1] = t1

        test_kernel()
        assert found[None] == 1
        assert abs(roots[0] - 3.0) < 1e-5
        assert abs(roots[1] - 3.0) < 1e-5

    def test_fully_degenerate(self):
        """Test negligible a and b report no solution."""
        from src.quadrics.geometry.quadric import _solve_quadratic_robust

        found = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            f, _, _ = _solve_quadratic_robust(0.0, 1e-9, 1.0)
            found[None] = f

        test_kernel()
        assert found[None] == 0


class TestHitQuadric:
    """Tests for hit_quadric."""

    def test_hit_sphere_head_on(self):
        """Test a ray down -z hits a radius-2 sphere at t=3."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        point = ti.field(dtype=ti.math.vec3, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -4.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 0.001, 1000.0)
            hit[None] = rec.hit
            t_val[None] = rec.t
            point[None] = rec.point
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 3.0) < 1e-4
        p = point[None]
        assert abs(p[0]) < 1e-4
        assert abs(p[1]) < 1e-4
        assert abs(p[2] - 2.0) < 1e-4
        n = normal[None]
        assert abs(n[0]) < 1e-4
        assert abs(n[1]) < 1e-4
        assert abs(n[2] - 1.0) < 1e-4
        assert front_face[None] == 1

    def test_hit_from_inside_flips_normal(self):
        """Test a ray from the centre hits the far side with an inward normal."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        t_val = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), 0.001, 1000.0)
            t_val[None] = rec.t
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert abs(t_val[None] - 1.0) < 1e-4
        n = normal[None]
        assert abs(n[0] + 1.0) < 1e-4
        assert front_face[None] == 0

    def test_miss(self):
        """Test a ray passing beside the sphere misses."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(2.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 0.001, 1000.0)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_t_range_respected(self):
        """Test hits outside [t_min, t_max] are rejected."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=2)
        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            near = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 0.001, 3.0)
            # t_min past the near side leaves the far side at t=6
            far = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 5.0, 1000.0)
            hit[0] = near.hit
            hit[1] = far.hit
            t_val[None] = far.t

        test_kernel()
        assert hit[0] == 0
        assert hit[1] == 1
        assert abs(t_val[None] - 6.0) < 1e-4

    def test_plane(self):
        """Test the purely linear equation z - 1 = 0 behaves as a plane."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=2)
        t_val = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(0.5, 0.5, 4.0), vec3(0.0, 0.0, -1.0), 0.001, 1000.0)
            parallel = hit_quadric(surface, vec3(0.0, 0.0, 4.0), vec3(1.0, 0.0, 0.0), 0.001, 1000.0)
            hit[0] = rec.hit
            hit[1] = parallel.hit
            t_val[None] = rec.t
            normal[None] = rec.normal

        test_kernel()
        assert hit[0] == 1
        assert hit[1] == 0
        assert abs(t_val[None] - 3.0) < 1e-4
        assert abs(normal[None][2] - 1.0) < 1e-4

    def test_zero_coefficients_never_hit(self):
        """Test the all-zero equation is degenerate and never hit."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 1,
            )
            rec = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 0.001, 1000.0)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_bounding_box_clips_near_side(self):
        """Test a box cutting the upper cap makes the ray hit the lower cap."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-1.5, -1.5, -1.5), vec3(1.5, 1.5, 0.0), 1,
            )
            rec = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 0.001, 1000.0)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 6.0) < 1e-4
        # Inner side of the lower cap faces the incoming ray
        assert abs(normal[None][2] - 1.0) < 1e-4

    def test_bounding_box_missed(self):
        """Test a ray that misses the clipping box misses the surface."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Cylinder x^2 + y^2 = 1 clipped to |z| <= 5
            surface = make_quadric_surface(
                1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-2.0, -2.0, -5.0), vec3(2.0, 2.0, 5.0), 1,
            )
            rec = hit_quadric(surface, vec3(-5.0, 0.0, 8.0), vec3(1.0, 0.0, 0.0), 0.001, 1000.0)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_cone_apex_normal_faces_ray(self):
        """Test a hit exactly at the cone apex still has a unit normal facing the ray."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, -1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(-5.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), 0.001, 1000.0)
            hit[None] = rec.hit
            normal[None] = rec.normal

        test_kernel()
        assert hit[None] == 1
        n = normal[None]
        assert abs(n[0] + 1.0) < 1e-4
        assert abs(n[1]) < 1e-4
        assert abs(n[2]) < 1e-4

    def test_zero_direction_never_hits(self):
        """Test a zero-length direction misses, with and without a clipping box."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        hit = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            for use_bbox in ti.static(range(2)):
                # Origin on the unit sphere, so f(O) == 0 for every t
                surface = make_quadric_surface(
                    1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                    vec3(-2.0, -2.0, -2.0), vec3(2.0, 2.0, 2.0), use_bbox,
                )
                rec = hit_quadric(surface, vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 0.0), 0.001, 1000.0)
                hit[use_bbox] = rec.hit

        test_kernel()
        assert hit[0] == 0
        assert hit[1] == 0

    def test_hit_point_lies_on_ray(self):
        """Test the reported point equals origin + t * direction for a non-unit direction."""
        from src.quadrics.geometry.quadric import hit_quadric, make_quadric_surface, vec3

        t_val = ti.field(dtype=ti.f32, shape=())
        point = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            rec = hit_quadric(surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -2.0), 0.001, 1000.0)
            t_val[None] = rec.t
            point[None] = rec.point

        test_kernel()
        assert abs(t_val[None] - 2.0) < 1e-4
        p = point[None]
        assert abs(p[0]) < 1e-5
        assert abs(p[1]) < 1e-5
        assert abs(p[2] - 1.0) < 1e-4

    def test_hit_quadric_default_range(self):
        """Test hit_quadric_default matches hit_quadric over [T_MIN, T_MAX]."""
        from src.quadrics.geometry.quadric import (
            T_MAX,
            T_MIN,
            hit_quadric,
            hit_quadric_default,
            make_quadric_surface,
            vec3,
        )

        t_vals = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            o = vec3(0.3, -0.2, 4.0)
            d = vec3(0.0, 0.0, -1.0)
            t_vals[0] = hit_quadric_default(surface, o, d).t
            t_vals[1] = hit_quadric(surface, o, d, T_MIN, T_MAX).t

        test_kernel()
        assert t_vals[0] == t_vals[1]


class TestSelectRoot:
    """Tests for the clipped root selection."""

    def test_retry_far_root_when_near_root_outside_box(self):
        """Test a near root outside the box falls back to the far root."""
        from src.quadrics.geometry.quadric import _select_root, make_quadric_surface, vec3

        valid = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-1.5, -1.5, -1.5), vec3(1.5, 1.5, 0.0), 1,
            )
            v, t = _select_root(
                surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 4.0, 6.0, 0.001, 1000.0
            )
            valid[None] = v
            t_val[None] = t

        test_kernel()
        assert valid[None] == 1
        assert abs(t_val[None] - 6.0) < 1e-5

    def test_both_roots_outside_box(self):
        """Test the pair is rejected when neither root lies in the box."""
        from src.quadrics.geometry.quadric import _select_root, make_quadric_surface, vec3

        valid = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-0.5, -0.5, -0.5), vec3(0.5, 0.5, 0.5), 1,
            )
            v, _ = _select_root(
                surface, vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), 4.0, 6.0, 0.001, 1000.0
            )
            valid[None] = v

        test_kernel()
        assert valid[None] == 0

    def test_near_root_behind_origin(self):
        """Test t1 is used when t0 is below t_min."""
        from src.quadrics.geometry.quadric import _select_root, make_quadric_surface, vec3

        valid = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            surface = make_quadric_surface(
                1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0,
                vec3(-10.0, -10.0, -10.0), vec3(10.0, 10.0, 10.0), 0,
            )
            v, t = _select_root(
                surface, vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), -1.0, 1.0, 0.001, 1000.0
            )
            valid[None] = v
            t_val[None] = t

        test_kernel()
        assert valid[None] == 1
        assert abs(t_val[None] - 1.0) < 1e-6
