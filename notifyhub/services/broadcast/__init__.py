from notifyhub.services.broadcast.redis_broadcaster import RedisBroadcaster, RoomSubscription

__all__ = ["RedisBroadcaster", "RoomSubscription"]
