"""
Unit Tests Package

This package contains unit tests for individual components:
- Planner: migration publish planning
- Publisher: file copies into the host application
- Resolver and strategies: active-tenant resolution
- Models: tenant registry model
"""
