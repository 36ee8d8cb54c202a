"""
Analytics Service

Aggregates site visits and artwork views for the admin dashboard.
"""

from sqlalchemy import func, desc
from gallery.extensions import db
from gallery.models import Obra, ObraView, SiteVisit


def format_duration(seconds):
    """Render seconds as ``45s`` or ``2m 5s``."""
    seconds = int(seconds or 0)
    if seconds < 60:
        return f'{seconds}s'
    minutes, secs = divmod(seconds, 60)
    return f'{minutes}m {secs}s'


def get_analytics_stats(top_obras_limit=10, top_countries_limit=5):
    """Counts are derived from record cardinality at read time."""
    total_visits = db.session.query(func.count(SiteVisit.id)).scalar() or 0
    unique_visitors = db.session.query(func.count(func.distinct(SiteVisit.ip_address))).scalar() or 0
    total_obra_views = db.session.query(func.count(ObraView.id)).scalar() or 0
    avg_duration = db.session.query(func.avg(SiteVisit.duration_seconds)).scalar()

    top_obras = db.session.query(Obra, func.count(ObraView.id).label('n'))\
        .join(ObraView, ObraView.obra_id == Obra.id)\
        .group_by(Obra.id).order_by(desc('n')).limit(top_obras_limit).all()

    top_countries = db.session.query(SiteVisit.country, func.count(SiteVisit.id).label('n'))\
        .filter(SiteVisit.country.isnot(None))\
        .group_by(SiteVisit.country).order_by(desc('n')).limit(top_countries_limit).all()

    avg_seconds = int(round(avg_duration)) if avg_duration is not None else 0
    return {
        'total_visits': total_visits,
        'unique_visitors': unique_visitors,
        'total_obra_views': total_obra_views,
        'avg_duration': avg_seconds,
        'avg_duration_display': format_duration(avg_seconds),
        'top_obras': [{'obra': obra.to_dict(), 'views': n} for obra, n in top_obras],
        'top_countries': [{'country': country, 'visits': n} for country, n in top_countries],
    }
