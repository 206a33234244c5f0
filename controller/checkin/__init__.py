"""Check-in controller: QR/search registration lookup and attendance confirmation."""
