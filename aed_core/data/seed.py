# =============================================================================
# aed_core/data/seed.py
# Sample campus inventory and submission log
# =============================================================================
"""
Sample data used to open the simulated remote store.

CU-AED-001 is fully operational; CU-AED-002 is the unit with a dead battery
from the second log entry. The rest cover the remaining status labels.
"""

SEED_INVENTORY = [
    {
        "id": 1,
        "Title": "CU-AED-001",
        "BuildingName": "Student Union",
        "BuildingCode": "SU",
        "Floor": "1",
        "SpecificLocationDescription": "Main lobby, next to the information desk",
        "Latitude": 40.0076,
        "Longitude": -105.2659,
        "IsPubliclyAccessible": True,
        "PhotoOfLocation": None,
        "Manufacturer": "ZOLL",
        "Model": "AED Plus",
        "SerialNumber": "X17A123456",
        "BatteryInstallDate": "2024-01-15T00:00:00Z",
        "BatteryLifespanMonths": 60,
        "CalculatedBatteryExpiryDate": "2029-01-15T00:00:00Z",
        "PadsInstallDate": "2024-01-15T00:00:00Z",
        "PadsLifespanMonths": 60,
        "PadsType": "CPR-D-padz Adult",
        "CalculatedPadsExpiryDate": "2029-01-15T00:00:00Z",
        "LastMonthlyCheckDate": "2025-05-01T09:00:00Z",
        "LastMonthlyCheckBy": "Derek Haase",
        "LastMonthlyCheckStatus": "Pass",
        "LastMonthlyCheckNotes": "Visual inspection OK. Green light flashing.",
        "Notes": "",
        "Created": "2024-01-15T10:00:00Z",
        "Modified": "2025-05-01T09:00:00Z",
    },
    {
        "id": 2,
        "Title": "CU-AED-002",
        "BuildingName": "Engineering Center",
        "BuildingCode": "EC",
        "Floor": "2",
        "SpecificLocationDescription": "East stairwell landing",
        "Latitude": 40.0072,
        "Longitude": -105.2625,
        "IsPubliclyAccessible": True,
        "PhotoOfLocation": None,
        "Manufacturer": "Philips",
        "Model": "HeartStart OnSite",
        "SerialNumber": "A14C-00321",
        "BatteryInstallDate": "2020-03-01T00:00:00Z",
        "BatteryLifespanMonths": 48,
        "CalculatedBatteryExpiryDate": "2024-03-01T00:00:00Z",
        "PadsInstallDate": "2023-06-01T00:00:00Z",
        "PadsLifespanMonths": 48,
        "PadsType": "SMART Pads Adult",
        "CalculatedPadsExpiryDate": "2027-06-01T00:00:00Z",
        "LastMonthlyCheckDate": "2025-05-15T09:00:00Z",
        "LastMonthlyCheckBy": "Derek Haase",
        "LastMonthlyCheckStatus": "Fail - Needs Attention",
        "LastMonthlyCheckNotes": "AED chirping, battery indicator red.",
        "Notes": "Replacement battery ordered",
        "Created": "2020-03-01T10:00:00Z",
        "Modified": "2025-05-15T09:00:00Z",
    },
    {
        "id": 3,
        "Title": "CU-AED-003",
        "BuildingName": "Norlin Library",
        "BuildingCode": "LIBR",
        "Floor": "B",
        "SpecificLocationDescription": "Basement study area by the elevators",
        "Latitude": 40.0086,
        "Longitude": -105.2708,
        "IsPubliclyAccessible": True,
        "PhotoOfLocation": None,
        "Manufacturer": "Cardiac Science",
        "Model": "Powerheart G5",
        "SerialNumber": "G5-778812",
        "BatteryInstallDate": "2023-09-01T00:00:00Z",
        "BatteryLifespanMonths": 48,
        "CalculatedBatteryExpiryDate": "2027-09-01T00:00:00Z",
        "PadsInstallDate": "2022-01-10T00:00:00Z",
        "PadsLifespanMonths": 24,
        "PadsType": "Intellisense Adult",
        "CalculatedPadsExpiryDate": "2024-01-10T00:00:00Z",
        "LastMonthlyCheckDate": "2025-04-28T14:30:00Z",
        "LastMonthlyCheckBy": "Priya Raman",
        "LastMonthlyCheckStatus": "Pass - Minor Issues",
        "LastMonthlyCheckNotes": "Pads past expiry date on package.",
        "Notes": "",
        "Created": "2022-01-10T10:00:00Z",
        "Modified": "2025-04-28T14:30:00Z",
    },
    {
        "id": 4,
        "Title": "CU-AED-004",
        "BuildingName": "Recreation Center",
        "BuildingCode": "REC",
        "Floor": "1",
        "SpecificLocationDescription": "Pool deck entrance, wall cabinet",
        "Latitude": 40.0106,
        "Longitude": -105.2694,
        "IsPubliclyAccessible": True,
        "PhotoOfLocation": None,
        "Manufacturer": "ZOLL",
        "Model": "AED 3",
        "SerialNumber": "AA19F004411",
        "BatteryInstallDate": "2019-05-20T00:00:00Z",
        "BatteryLifespanMonths": 60,
        "CalculatedBatteryExpiryDate": "2024-05-20T00:00:00Z",
        "PadsInstallDate": "2019-05-20T00:00:00Z",
        "PadsLifespanMonths": 60,
        "PadsType": "CPR Uni-padz",
        "CalculatedPadsExpiryDate": "2024-05-20T00:00:00Z",
        "LastMonthlyCheckDate": "2025-03-02T08:15:00Z",
        "LastMonthlyCheckBy": "Priya Raman",
        "LastMonthlyCheckStatus": "Pass",
        "LastMonthlyCheckNotes": "Unit powers on.",
        "Notes": "",
        "Created": "2019-05-20T10:00:00Z",
        "Modified": "2025-03-02T08:15:00Z",
    },
    {
        "id": 5,
        "Title": "CU-AED-005",
        "BuildingName": "Wardenburg Health Center",
        "BuildingCode": "WARD",
        "Floor": "3",
        "SpecificLocationDescription": "Nurse station, behind the counter",
        "Latitude": 40.0060,
        "Longitude": -105.2733,
        "IsPubliclyAccessible": False,
        "PhotoOfLocation": None,
        "Manufacturer": "Physio-Control",
        "Model": "LIFEPAK CR2",
        "SerialNumber": "CR2-559031",
        "BatteryInstallDate": "2024-08-01T00:00:00Z",
        "BatteryLifespanMonths": 48,
        "CalculatedBatteryExpiryDate": "2028-08-01T00:00:00Z",
        "PadsInstallDate": "2024-08-01T00:00:00Z",
        "PadsLifespanMonths": 48,
        "PadsType": "QUIK-STEP",
        "CalculatedPadsExpiryDate": "2028-08-01T00:00:00Z",
        "LastMonthlyCheckDate": "2025-05-10T11:00:00Z",
        "LastMonthlyCheckBy": "Derek Haase",
        "LastMonthlyCheckStatus": "Fail - Needs Attention",
        "LastMonthlyCheckNotes": "Cabinet alarm not sounding when opened.",
        "Notes": "Staff-only area",
        "Created": "2024-08-01T10:00:00Z",
        "Modified": "2025-05-10T11:00:00Z",
    },
]

SEED_SUBMISSION_LOG = [
    {
        "logId": 1,
        "Title": "CU-AED-001 - Monthly Check - 05/01/2025",
        "AedLinkTitle": "CU-AED-001",
        "SubmissionTimestamp": "2025-05-01T09:00:00Z",
        "SubmittedBy": "Derek Haase",
        "SubmissionType": "Monthly Check",
        "SummaryOfAction": "Visual inspection OK. Green light flashing.",
        "AppVersion": "1.0",
        "Created": "2025-05-01T09:00:00Z",
        "Modified": "2025-05-01T09:00:00Z",
    },
    {
        "logId": 2,
        "Title": "CU-AED-002 - Monthly Check - 05/15/2025",
        "AedLinkTitle": "CU-AED-002",
        "SubmissionTimestamp": "2025-05-15T09:00:00Z",
        "SubmittedBy": "Derek Haase",
        "SubmissionType": "Monthly Check",
        "SummaryOfAction": "AED chirping, battery indicator red.",
        "AppVersion": "1.0",
        "Created": "2025-05-15T09:00:00Z",
        "Modified": "2025-05-15T09:00:00Z",
    },
]
