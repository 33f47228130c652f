"""Presenters turning engine results into console renderables."""
