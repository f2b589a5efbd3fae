QBER_THRESHOLD = 0.11  # Theoretical BB84 threshold

DEFAULT_SIMULATION_PARAMETERS = {
    "numQubits": 800,
    "qberSampleSize": 20,  # Percentage
    "errorCorrectionBlockSize": 32,
    "privacyAmplificationLength": 128,
    "enableEve": False,
    "enableSecureMode": False,
}

# Input ranges offered by the parameter form
PARAMETER_RANGES = {
    "numQubits": {"min": 100, "max": 5000},
    "qberSampleSize": {"min": 5, "max": 100},
    "errorCorrectionBlockSize": {"min": 4, "max": 256},
    "privacyAmplificationLength": {"min": 16, "max": 256, "step": 4},
}
