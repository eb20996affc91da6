"""Minimal offline ray tracer built on Taichi.

Reads a render config and a scene description, traces one jittered primary
ray per pixel sample and writes the averaged, gamma-encoded image:
- Spheres and capped cylinders with named materials
- Pinhole and thin-lens cameras with a seeded, reproducible random stream
- Normal-visualisation shading over a sky gradient
- PPM and PNG output

Subpackages:
    core: Vectors, rays and the shading integrator
    geometry: Ray-primitive intersection routines
    camera: Primary ray generation
    scene: Scene data model, builder and scene-level queries
    parsing: Config and scene file parsers with their error types
    preview: Image encoding and export
"""

__version__ = "0.1.0"
