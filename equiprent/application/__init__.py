"""
Application Layer - Services and factories.

- services: mutation orchestration, relationship and attachment managers
- factories: wiring of stores and services from configuration
"""
