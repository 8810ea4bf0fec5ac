"""Collaborators used by the routes: manifest, PDF search, i18n, diagnostics."""
