"""
E-Learning Package - DSP (Digital Solutions Platform)

Lernplattform mit Kurskatalog, Kauf-Abwicklung und Lernfortschritt.

Features:
- Benutzerverwaltung mit Rollen (student, instructor, admin)
- Kurse und Lektionen mit Medien im Object Storage
- Kurskauf über Stripe oder Razorpay mit abgeglichenem Kaufjournal
- Fortschrittsverfolgung und Kursbewertungen

Struktur:
- users/: Benutzerverwaltung und Authentifizierung
- courses/: Kurse, Lektionen und Einschreibungen
- purchases/: Kaufjournal, Reconciliation und Webhooks
- progress/: Lernfortschritt pro Kurs und Lektion
- reviews/: Kursbewertungen
- services/: Media Storage und E-Mail Versand

Author: DSP Development Team
Version: 1.0.0
"""
