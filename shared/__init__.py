"""
Shared utilities for Crieur services.

Provides the SystemReporter logging facade, health check primitives
and the LaborantTest base class used by every service test suite.
"""
