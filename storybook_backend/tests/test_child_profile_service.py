from storybook_backend.integrations.service_error import ServiceError
from storybook_backend.services import child_profile_service
from storybook_backend.tests.helpers import StoreTestCase


class ChildProfileServiceTests(StoreTestCase):
    def test_upsert_keeps_existing_voice_fields(self):
        first = child_profile_service.save_voice(
            {"parentEmail": "p@x.com", "childName": "Mia", "voiceUrl": "voice/1.mp3", "voiceOwner": "Mum"}
        )
        second = child_profile_service.save_voice({"parentEmail": "p@x.com", "childName": "Mia", "voiceUrl": "voice/2.mp3"})

        self.assertEqual(first["id"], second["id"])
        profile = child_profile_service.get_profile("p@x.com", "Mia")
        self.assertEqual(profile["voiceUrl"], "voice/2.mp3")
        self.assertEqual(profile["voiceOwner"], "Mum")

    def test_profiles_are_scoped_by_child_name(self):
        child_profile_service.save_voice({"parentEmail": "p@x.com", "childName": "Mia", "voiceUrl": "a"})
        child_profile_service.save_voice({"parentEmail": "p@x.com", "childName": "Leo", "voiceUrl": "b"})

        self.assertEqual(child_profile_service.get_profile("p@x.com", "Leo")["voiceUrl"], "b")
        self.assertEqual(len(child_profile_service.list_profiles()), 2)

    def test_delete_voice_without_profile_is_noop(self):
        result = child_profile_service.save_voice({"parentEmail": "p@x.com", "childName": "Mia", "action": "delete_voice"})

        self.assertEqual(result, {"success": True})
        self.assertEqual(child_profile_service.list_profiles(), [])

    def test_lookup_requires_both_keys(self):
        with self.assertRaises(ServiceError) as ctx:
            child_profile_service.get_profile("p@x.com", "")
        self.assertEqual(ctx.exception.message, "Missing parameters")
