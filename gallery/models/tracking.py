"""
Visit Tracking Models

Site visits and artwork views keyed by the anonymous tab session id.
"""

from datetime import datetime
from gallery.extensions import db


class SiteVisit(db.Model):
    """One session's presence on the site"""
    __tablename__ = 'site_visits'
    
    id = db.Column(db.Integer, primary_key=True)
    # Not unique: duplicates are prevented by the per-session marker only
    session_id = db.Column(db.String(64), nullable=False, index=True)
    ip_address = db.Column(db.String(64))
    country = db.Column(db.String(100))
    city = db.Column(db.String(100))
    duration_seconds = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    
    def to_dict(self):
        return {
            'id': self.id,
            'session_id': self.session_id,
            'ip_address': self.ip_address,
            'country': self.country,
            'city': self.city,
            'duration_seconds': self.duration_seconds,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
    
    def __repr__(self):
        return f'<SiteVisit {self.session_id} {self.duration_seconds}s>'


class ObraView(db.Model):
    """One session's viewing of one artwork"""
    __tablename__ = 'obra_views'
    
    id = db.Column(db.Integer, primary_key=True)
    obra_id = db.Column(db.Integer, db.ForeignKey('obras.id'), nullable=False, index=True)
    session_id = db.Column(db.String(64), nullable=False, index=True)
    ip_address = db.Column(db.String(64))
    country = db.Column(db.String(100))
    city = db.Column(db.String(100))
    duration_seconds = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    def to_dict(self):
        return {
            'id': self.id,
            'obra_id': self.obra_id,
            'session_id': self.session_id,
            'ip_address': self.ip_address,
            'country': self.country,
            'city': self.city,
            'duration_seconds': self.duration_seconds,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
    
    def __repr__(self):
        return f'<ObraView obra:{self.obra_id} {self.duration_seconds}s>'
