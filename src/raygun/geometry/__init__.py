"""Geometry module for the sphere primitive and its aggregate.

Components:
    sphere: Sphere descriptor, device structs and ray-sphere intersection
    hittable_list: Ordered, owning aggregate of spheres and nested lists

Intersection routines are Taichi functions (@ti.func) returning a
HitRecord whose ``hit`` flag encodes the optional result:

    rec = hit_sphere(ray, SphereGeometry(center=c, radius=r), t_min, t_max)
"""

from .hittable_list import Hittable, HittableList
from .sphere import (
    HitRecord,
    Sphere,
    SphereGeometry,
    check_radius,
    hit_sphere,
    make_miss_record,
)

__all__ = [
    "Sphere",
    "SphereGeometry",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "check_radius",
    "Hittable",
    "HittableList",
]
