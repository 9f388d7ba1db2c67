TRYON_PROMPT = """
Take the clothing item from the second image and realistically place it on the person from the first image.
Prioritize high resolution and photorealism.
Preserve the person's pose and the original background.
Ensure the clothing fits naturally.
The output should be only the final photorealistic image.
""".strip()

SHARE_TITLE = "My Virtual Wardrobe Creation"
SHARE_TEXT = "Check out this outfit I tried on virtually!"
RESULT_FILENAME = "virtual-wardrobe-result.jpeg"

SAMPLE_PEOPLE = [
    "https://picsum.photos/id/1025/300/300",  # person with a dog
    "https://picsum.photos/id/1011/300/300",  # woman in a field
    "https://picsum.photos/id/1005/300/300",  # man on a boat
    "https://picsum.photos/id/433/300/300",  # man in city
    "https://picsum.photos/id/628/300/300",  # woman in front of wall
    "https://picsum.photos/id/836/300/300",  # man smiling
]

SAMPLE_CLOTHING = [
    "https://picsum.photos/id/1060/300/300",  # denim jacket
    "https://picsum.photos/id/219/300/300",  # t-shirt
    "https://picsum.photos/id/308/300/300",  # hat
    "https://picsum.photos/id/583/300/300",  # plaid shirt
    "https://picsum.photos/id/1074/300/300",  # sweater
    "https://picsum.photos/id/357/300/300",  # hoodie
]
