from rest_framework.throttling import AnonRateThrottle


class AppointmentThrottle(AnonRateThrottle):
    """Limits public booking submissions per client address."""
    scope = 'appointments'
