# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
moveclone: capture-clone expansion for closure and async-block literals.

Front-end modules live under this package. The CLI entrypoint is
`moveclone.driver:main` (`python -m moveclone`).
"""

__all__ = []
