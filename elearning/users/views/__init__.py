"""
E-Learning Users Views Package - DSP (Digital Solutions Platform)

Dieses Paket enthält alle Views für die Benutzerverwaltung im E-Learning-System.

Features:
- JWT-basierte Authentifizierung mit Cookies
- Registrierung und Profilverwaltung
- Passwort ändern und zurücksetzen
- Logout-Funktionalität mit Token-Invalidierung

Author: DSP Development Team
Created: 10.07.2025
Version: 1.0.0
"""

from .auth_views import (
    CustomTokenObtainPairView,
    CustomTokenRefreshView,
    LogoutView,
    RegistrationView,
)
from .profile_views import (
    ChangePasswordView,
    DeleteAccountView,
    ForgotPasswordView,
    ProfileView,
    ResetPasswordView,
)
