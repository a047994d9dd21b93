"""FHIR identifier systems used by the Satu Sehat registry."""

# Nomor Induk Kependudukan (16-digit national identity number)
NIK_SYSTEM = "http://terminology.kemkes.go.id/identifier/nik"
