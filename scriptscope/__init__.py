"""Reconcile a page's DOM ``<script>`` elements with its captured script transfers."""

__version__ = "0.1.0"
