"""Demo PG documents loaded by ``manage.py seed_sample_pgs``."""
from __future__ import annotations

from .gateway import CallerContext

SAMPLE_OWNER = CallerContext(owner_id="sample-uid-1", name="Sneha", email="chvsneha2310@gmail.com")

_COMMON = {
    "state": "Karnataka",
    "gateOpening": "06:00",
    "smokingAllowed": False,
    "drinkingAllowed": False,
    "availability": "open",
    "ownerPhone": "+91 9876543210",
}

SAMPLE_PGS = [
    {
        **_COMMON,
        "name": "Green Valley PG",
        "description": "Modern PG with excellent amenities near tech parks",
        "address": "123 Koramangala 5th Block, Bangalore",
        "city": "bangalore",
        "pincode": "560095",
        "pgType": "any",
        "totalRooms": 15,
        "availableRooms": 3,
        "monthlyRent": 12000,
        "nearestCollege": "christ",
        "distance": 2.5,
        "amenities": ["WiFi", "AC", "Food Included", "Laundry", "CCTV"],
        "gateClosing": "22:00",
    },
    {
        **_COMMON,
        "name": "Sunrise Residency",
        "description": "Comfortable accommodation for working professionals",
        "address": "456 BTM Layout 2nd Stage, Bangalore",
        "city": "bangalore",
        "pincode": "560076",
        "pgType": "male",
        "totalRooms": 12,
        "availableRooms": 2,
        "monthlyRent": 10500,
        "nearestCollege": "rvce",
        "distance": 3.2,
        "amenities": ["WiFi", "Power Backup", "Attached Bathroom", "Parking"],
        "gateClosing": "23:00",
    },
    {
        **_COMMON,
        "name": "Elite Heights",
        "description": "Premium PG with modern facilities",
        "address": "789 Whitefield Main Road, Bangalore",
        "city": "bangalore",
        "pincode": "560066",
        "pgType": "female",
        "totalRooms": 18,
        "availableRooms": 5,
        "monthlyRent": 15000,
        "nearestCollege": "pesit",
        "distance": 1.8,
        "amenities": ["WiFi", "AC", "Food Included", "Laundry", "CCTV", "Power Backup"],
        "gateClosing": "22:30",
    },
    {
        **_COMMON,
        "name": "Green Valley Annexe",
        "description": "Annexe block of Green Valley PG with a mapped floor plan",
        "address": "125 Koramangala 5th Block, Bangalore",
        "city": "bangalore",
        "pincode": "560095",
        "pgType": "any",
        "totalRooms": 3,
        "availableRooms": 1,
        "monthlyRent": 12000,
        "nearestCollege": "christ",
        "distance": 2.6,
        "amenities": ["WiFi", "AC", "Food Included", "Laundry", "CCTV"],
        "gateClosing": "22:00",
        "buildingLayout": {
            "floors": 1,
            "roomsPerFloor": 3,
            "rooms": [
                {
                    "id": "101",
                    "number": "101",
                    "floorId": 0,
                    "rent": 12000,
                    "capacity": 2,
                    "occupied": 2,
                    "status": "occupied",
                    "occupants": [
                        {"name": "Rahul Sharma", "college": "Christ University", "year": "3rd Year"},
                        {"name": "Amit Kumar", "college": "Christ University", "year": "2nd Year"},
                    ],
                    "amenities": ["WiFi", "AC", "Attached Bathroom"],
                    "sharingType": "Double",
                },
                {
                    "id": "102",
                    "number": "102",
                    "floorId": 0,
                    "rent": 10000,
                    "capacity": 3,
                    "occupied": 3,
                    "status": "occupied",
                    "occupants": [
                        {"name": "Priya Singh", "college": "RVCE", "year": "4th Year"},
                        {"name": "Sneha Patel", "college": "RVCE", "year": "3rd Year"},
                        {"name": "Kavya Reddy", "college": "Christ University", "year": "2nd Year"},
                    ],
                    "amenities": ["WiFi", "Attached Bathroom"],
                    "sharingType": "Triple",
                },
                {
                    "id": "103",
                    "number": "103",
                    "floorId": 0,
                    "rent": 15000,
                    "capacity": 1,
                    "occupied": 0,
                    "status": "available",
                    "occupants": [],
                    "amenities": ["WiFi", "AC", "Attached Bathroom", "Balcony"],
                    "sharingType": "Single",
                },
            ],
        },
    },
]
