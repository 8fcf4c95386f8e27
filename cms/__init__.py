"""Content application for the clinic website.

This package contains the models, services, serializers and views behind
the public site sections, the admin content panel (including the ordered
list reordering) and the WordPress blog mirror.
"""
