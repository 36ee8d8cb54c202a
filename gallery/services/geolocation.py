"""
IP Geolocation Service

Resolves the coarse location of a client address through the ipapi.co
lookup API. The address is taken from the request. Lookups are best-effort:
every failure falls back to unknown values instead of raising.
"""

import ipaddress
import logging
import threading
import time
import requests
from gallery.config import Config

logger = logging.getLogger(__name__)

UNKNOWN_IP = 'unknown'


def unknown_location(ip=UNKNOWN_IP):
    return {'ip': ip, 'country': None, 'city': None}


def is_public_address(ip):
    """True when ``ip`` is a globally routable address."""
    if not ip or ip == UNKNOWN_IP:
        return False
    try:
        return ipaddress.ip_address(ip).is_global
    except ValueError:
        return False


class GeoCache:
    """Per-IP lookup results kept for ``ttl`` seconds."""

    def __init__(self, ttl=Config.GEO_CACHE_TTL, clock=time.time):
        self.ttl = ttl
        self.clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, ip):
        with self._lock:
            entry = self._entries.get(ip)
            if entry is None:
                return None
            data, stored_at = entry
            if self.clock() - stored_at > self.ttl:
                del self._entries[ip]
                return None
            return dict(data)

    def put(self, data):
        with self._lock:
            self._entries[data['ip']] = (dict(data), self.clock())

    def clear(self):
        with self._lock:
            self._entries.clear()


def get_geolocation(ip, cache=None, url=Config.GEO_LOOKUP_URL, timeout=Config.GEO_LOOKUP_TIMEOUT):
    """Resolve country and city for ``ip``."""
    if ip == UNKNOWN_IP:
        return unknown_location(ip)

    if cache is not None:
        cached = cache.get(ip)
        if cached is not None:
            return cached

    try:
        resp = requests.get(url.format(ip=ip), timeout=timeout)
        if resp.status_code != 200:
            raise ValueError(f'geolocation lookup returned {resp.status_code}')
        data = resp.json()
        # ipapi.co reports quota and reserved-range problems in the body
        if data.get('error'):
            raise ValueError(data.get('reason') or 'geolocation lookup error')
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning('Could not resolve geolocation for %s: %s', ip, e)
        return unknown_location(ip)

    location = {
        'ip': ip,
        'country': data.get('country_name') or None,
        'city': data.get('city') or None,
    }
    if cache is not None:
        cache.put(location)
    return location


class Geolocator:
    """Bundles lookup settings and the cache for the tracking layer."""

    def __init__(self, geo_url=Config.GEO_LOOKUP_URL, timeout=Config.GEO_LOOKUP_TIMEOUT,
                 cache=None):
        self.geo_url = geo_url
        self.timeout = timeout
        self.cache = cache if cache is not None else GeoCache()

    @classmethod
    def from_config(cls, config):
        return cls(
            geo_url=config['GEO_LOOKUP_URL'],
            timeout=config['GEO_LOOKUP_TIMEOUT'],
            cache=GeoCache(ttl=config['GEO_CACHE_TTL']),
        )

    def resolve_ip(self, remote_addr=None):
        """The request address when it is public, otherwise unknown.

        Behind a reverse proxy every request comes from the proxy, so
        TRUST_PROXY must be set for client addresses to reach this point.
        """
        if is_public_address(remote_addr):
            return remote_addr
        logger.debug('Client address %s is not public; location left unknown', remote_addr)
        return UNKNOWN_IP

    def locate(self, remote_addr=None):
        ip = self.resolve_ip(remote_addr)
        return get_geolocation(ip, cache=self.cache, url=self.geo_url, timeout=self.timeout)
