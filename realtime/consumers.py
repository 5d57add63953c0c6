from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.conf import settings

from .groups import PUBLIC_FEED_GROUP


class FeedConsumer(AsyncJsonWebsocketConsumer):
    """
    모든 구독자는 feed.public 그룹 하나에 참여한다. (인증 여부와 무관하게 같은 이벤트 수신)
    group_send 예:
        await channel_layer.group_send(
            PUBLIC_FEED_GROUP,
            {"type": "feed.processed", "id": "<lettering uuid>"}
        )
    """

    async def connect(self):
        self.user_id = self.scope.get("user_id")
        if not self.user_id and getattr(settings, "REALTIME_REQUIRE_AUTH", False):
            await self.close(code=4401)  # unauthorized
            return

        self.joined = True
        await self.channel_layer.group_add(PUBLIC_FEED_GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, code):
        if getattr(self, "joined", False):
            await self.channel_layer.group_discard(PUBLIC_FEED_GROUP, self.channel_name)

    async def receive_json(self, content, **kwargs):
        if content and content.get("type") == "ping":
            await self.send_json({"type": "pong"})

    async def feed_processed(self, event):
        await self.send_json({"type": "PROCESSED", "id": event.get("id")})
