"""Palette-quantized ray and path tracing core built on Taichi.

This package renders a stylized image per frame: every output pixel is an
independent Taichi worker that traces the scene, shades the hit with either a
fixed-depth path tracer or Cook-Torrance direct lighting, and snaps the
result onto a fixed 32-color palette.

Subpackages:
    core: Rays, the stateless RNG, settings, the integrator and frame driver
    geometry: Sphere, triangle and bounding-box intersection, host mesh data
    materials: PBR material storage, bounce scattering and the microfacet BRDF
    scene: Scene buffers, lights, closest-hit queries and the scene manager
    camera: Look-at camera with orthographic and perspective primary rays
    palette: Palette tables and nearest-color quantization
    preview: PNG export and Matplotlib display of rendered frames
"""

__version__ = "0.1.0"
