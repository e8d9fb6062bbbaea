"""
E-Learning Users Package - DSP (Digital Solutions Platform)

Benutzerprofile mit Plattform-Rolle, Authentifizierung über JWT-Cookies
und Passwortverwaltung.

Struktur:
- models.py: Profile und Signal-Handler für die automatische Profilerstellung
- serializers.py: API-Serialisierung für Benutzerdaten
- views/: Authentifizierungs- und Profil-Views

Author: DSP Development Team
Version: 1.0.0
"""
