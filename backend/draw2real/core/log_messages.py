"""
日志消息模板模块
统一管理所有业务日志消息模板
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    START_OPERATION = "开始执行操作: {operation_name}"
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"
    RETRY_ATTEMPT = "操作失败，准备重试: {operation_name} (第{attempt}/{max_attempts}次, 等待{delay:.2f}秒)"
    RETRY_EXHAUSTED = "重试次数已用尽: {operation_name} (共{max_attempts}次)"

    # ==================== 积分账本相关 ====================
    CREDIT_DEDUCTED = "积分扣减成功: user_id={user_id}, amount={amount}, balance={balance}"
    CREDIT_INSUFFICIENT = "积分不足: user_id={user_id}, amount={amount}"
    CREDIT_GRANTED = "积分发放成功: user_id={user_id}, amount={amount}, kind={kind}"
    CREDIT_GRANT_DUPLICATE = "积分发放已处理，跳过: reference={reference}"
    CREDIT_OPERATION_FAILED = "积分账本操作失败: user_id={user_id}"

    # ==================== 画作捕获相关 ====================
    DRAWING_SET = "画作已保存: session={session_id}, size={size}"
    DRAWING_CLEARED = "画作已清除: session={session_id}"
    DRAWING_CACHE_FAILED = "会话缓存操作失败: session={session_id}"

    # ==================== 图片存储相关 ====================
    BUCKET_CREATED = "存储桶已创建: {bucket}"
    FILE_UPLOAD_START = "开始文件上传: {bucket}/{key}"
    FILE_UPLOAD_SUCCESS = "文件上传成功: {url}"
    FILE_UPLOAD_FAILED = "文件上传失败: {bucket}/{key}"
    ORIGINAL_UPLOAD_SKIPPED = "原图上传失败，继续生成流程: {key}"
    REMOTE_FETCH_START = "开始下载远程图片: {url}"
    REMOTE_FETCH_FAILED = "下载远程图片失败: {url}"

    # ==================== 生成流程相关 ====================
    GENERATION_STARTED = "生成任务已开始: attempt_id={attempt_id}, user_id={user_id}"
    GENERATION_STATE = "生成状态变更: attempt_id={attempt_id}, state={state}"
    GENERATION_SUCCEEDED = "生成成功: attempt_id={attempt_id}, url={url}"
    GENERATION_FAILED = "生成失败: attempt_id={attempt_id}, reason={reason}"
    GENERATION_CANCELLED = "生成已取消: attempt_id={attempt_id}"
    GENERATION_REJECTED = "生成请求被拒绝: user_id={user_id}, reason={reason}"
    GALLERY_WRITE_FAILED = "画廊记录写入失败，已忽略: attempt_id={attempt_id}"

    # ==================== AI服务相关 ====================
    AI_CALL_START = "调用AI服务: {provider} / {model}"
    AI_CALL_FAILED = "AI服务调用失败: {provider} / {model}"

    # ==================== 支付与推荐相关 ====================
    CHECKOUT_CREATED = "支付会话已创建: session_id={session_id}, user_id={user_id}, package={package}"
    CHECKOUT_CONFIRMED = "支付已确认: session_id={session_id}, credits={credits}"
    CHECKOUT_FAILED = "支付操作失败: {operation_name}"
    WEBHOOK_RECEIVED = "收到支付回调事件: {event_type}"
    REFERRAL_REGISTERED = "推荐关系已登记: referrer={referrer_id}, referred={referred_id}"
    REFERRAL_REWARDED = "推荐奖励已发放: referrer={referrer_id}, referred={referred_id}"

    # ==================== 数据库操作相关 ====================
    DB_QUERY_FAILED = "数据库查询失败"
    DB_UPDATE_FAILED = "数据库更新失败"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()
