"""
Models Package

Exports all models for easy importing.
"""

from gallery.models.user import User
from gallery.models.obra import Obra
from gallery.models.tracking import SiteVisit, ObraView

# Table names exposed through the data facade
TABLES = {
    'users': User,
    'obras': Obra,
    'site_visits': SiteVisit,
    'obra_views': ObraView,
}

__all__ = ['User', 'Obra', 'SiteVisit', 'ObraView', 'TABLES']
