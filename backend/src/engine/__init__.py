"""Rendering engine: viewport compositing and frame encoding."""
