"""
Tracking Store

Site visit and artwork view records written through the data facade.
"""

from gallery.models import ObraView, SiteVisit


class TrackingStore:

    def __init__(self, datastore):
        self.datastore = datastore

    def record_site_visit(self, session_id, geo):
        return self.datastore.insert('site_visits', {
            'session_id': session_id,
            'ip_address': geo.get('ip'),
            'country': geo.get('country'),
            'city': geo.get('city'),
            'duration_seconds': 0,
        })

    def update_visit_duration(self, session_id, seconds):
        # Absolute overwrite; the guard drops late writes carrying a smaller value
        return self.datastore.update(
            'site_visits', {'duration_seconds': seconds},
            SiteVisit.duration_seconds <= seconds,
            session_id=session_id,
        )

    def record_obra_view(self, obra_id, session_id, geo):
        row = self.datastore.insert('obra_views', {
            'obra_id': obra_id,
            'session_id': session_id,
            'ip_address': geo.get('ip'),
            'country': geo.get('country'),
            'city': geo.get('city'),
            'duration_seconds': 0,
        })
        return row['id']

    def update_obra_view_duration(self, view_id, seconds):
        return self.datastore.update(
            'obra_views', {'duration_seconds': seconds},
            ObraView.duration_seconds <= seconds,
            id=view_id,
        )

    def count_obra_views(self, obra_id):
        return self.datastore.count('obra_views', obra_id=obra_id)
